import logging
import os
import sys

import uvicorn
from pydantic import ValidationError

from brewmon.core.config import load_settings
from brewmon.core.logging_config import configure_logging

logger = logging.getLogger("brewmon")


def main() -> None:
    try:
        settings = load_settings()
    except ValidationError as e:
        configure_logging()
        logger.error("Missing or invalid configuration, exiting: %s", e)
        sys.exit(1)

    uvicorn.run(
        "brewmon.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8080")),
        reload=not settings.is_production,
    )


if __name__ == "__main__":
    main()
