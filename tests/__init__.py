# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the DevCamper API:
# - test_pipeline.py: The ordered request pipeline end to end
# - test_auth.py, test_routers.py: Routers behind the pipeline
# - test_sanitize.py, test_rate_limit_store.py, test_supervisor.py: lib/ units
# - test_config.py, test_context.py, test_exceptions.py: app/ units
#
# Run tests with: pytest
# =============================================================================
