import logging
import sys

from app.settings import settings

FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# SDK clients log every request/response body at DEBUG
QUIET_LOGGERS = (
    "botocore",
    "boto3",
    "s3transfer",
    "urllib3",
    "httpx",
    "httpcore",
    "openai",
)


def configure_logging(level: str) -> logging.Logger:
    """
    Send everything to stdout (picked up by CloudWatch / the container runtime)
    and return the application logger.
    """
    level = level.upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(FORMAT))

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO)

    app_logger = logging.getLogger(settings.PROJECT_NAME)
    app_logger.setLevel(level)
    return app_logger


logger = configure_logging(settings.LOG_LEVEL)
logger.debug(f"Logger initialised level={settings.LOG_LEVEL}")
