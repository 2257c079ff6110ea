# =============================================================================
# app/server.py - Process Entry Point
# =============================================================================
# Runs the API under uvicorn and exits with the supervisor's exit code, so
# an unhandled background failure with EXIT_ON_UNHANDLED_ERROR enabled ends
# the process with status 1 after a graceful shutdown.
#
# Usage:
#   python -m app.server
# =============================================================================

import sys

import uvicorn

from app.main import app


def run() -> None:
    settings = app.state.settings
    supervisor = app.state.supervisor

    config = uvicorn.Config(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
    )
    server = uvicorn.Server(config)

    def request_exit() -> None:
        server.should_exit = True

    supervisor.set_shutdown_hook(request_exit)
    server.run()
    sys.exit(supervisor.exit_code)


if __name__ == "__main__":
    run()
