"""Application entry point."""

import uvicorn

from fitness_tracker.config import SETTINGS
from fitness_tracker.logging_setup import setup_logging


def main() -> None:
    setup_logging()
    uvicorn.run(
        "fitness_tracker.server.main:app",
        host=SETTINGS.HOST,
        port=SETTINGS.PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
