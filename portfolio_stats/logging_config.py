"""Logging setup for the service process."""

import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # requests' connection pool is chatty at INFO
    logging.getLogger("urllib3").setLevel(logging.WARNING)
