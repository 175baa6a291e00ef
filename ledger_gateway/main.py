"""Entry point for ledger-gateway.

Runs the FastAPI application under uvicorn with host, port and log level
taken from settings.
"""

from __future__ import annotations

import sys
from typing import NoReturn


def main() -> NoReturn:
    """Run the FastAPI application server."""
    import uvicorn

    from ledger_gateway.core.settings import get_app_settings, get_logging_settings

    settings = get_app_settings()
    log_settings = get_logging_settings()

    uvicorn.run(
        "ledger_gateway.app.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        access_log=settings.debug,
        log_level=log_settings.level.lower(),
    )
    sys.exit(0)


if __name__ == "__main__":
    main()
