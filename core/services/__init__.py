# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .resource_service import ResourceService

__all__ = [
    "ResourceService",
]
