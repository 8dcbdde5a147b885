"""Run the API with uvicorn: python -m projects_api

Startup failures are reported from two places:
    - the app lifespan (database setup), see projects_api.main
    - main() below, for exceptions raised out of uvicorn.run itself

uvicorn handles a socket bind failure by logging it and exiting with
SystemExit; that exit carries no exception to report and is left alone.
"""

import asyncio
import logging

import uvicorn

from projects_api.config import get_settings
from projects_api.main import report_startup_failure

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    try:
        uvicorn.run(
            "projects_api.main:app", host="0.0.0.0", port=settings.port,
            log_config=None,
        )
    except Exception as exc:
        logger.error(f"[STARTUP ERROR] Server failed to start: {exc}", exc_info=True)
        asyncio.run(report_startup_failure(settings, exc))
        raise


if __name__ == "__main__":
    main()
