import logging
import sys
import os
from pathlib import Path

from config import settings


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Set up application logging configuration
    """
    # Serverless and test runs log to stdout only
    is_ephemeral = os.getenv("VERCEL") or os.getenv("AWS_LAMBDA_FUNCTION_NAME") or settings.NODE_ENV == "test"

    handlers = [logging.StreamHandler(sys.stdout)]

    if not is_ephemeral:
        try:
            log_dir = Path("logs")
            log_dir.mkdir(exist_ok=True)
            handlers.append(logging.FileHandler(log_dir / "app.log"))
        except (OSError, PermissionError):
            # If we can't create the logs directory, just use stdout
            pass

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )

    return logging.getLogger("elearning_api")


# Create a global logger instance
logger = setup_logging(settings.LOG_LEVEL)
