"""Run the Task Service API: ``python -m task_service``."""

import logging

import uvicorn

from task_service.config import Settings
from task_service.logging_setup import setup_logging
from task_service.main import create_app

logger = logging.getLogger("task_service")


def main() -> None:
    settings = Settings.from_env()
    setup_logging(settings.log_level)

    logger.info("Starting task service backend=%s", settings.backend)
    logger.info("Listening on %s:%s", settings.host, settings.port)
    # log_config=None keeps uvicorn on the handlers installed above.
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
