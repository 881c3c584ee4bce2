"""Run the action tracker with uvicorn."""

import logging

import uvicorn

from action_tracker.config import HOST, LOG_LEVEL, PORT

logger = logging.getLogger(__name__)


def main() -> None:
    logging.basicConfig(level=LOG_LEVEL)
    logger.info("Serving action tracker on http://%s:%s", HOST, PORT)
    uvicorn.run("action_tracker.main:app", host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
