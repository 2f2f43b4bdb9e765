import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once for the whole application."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # SQL echo is only useful when debugging the store itself
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
