import logging

from app.core.config import Config


def configure_logging() -> None:
    level = logging.DEBUG if Config.DEBUG else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if Config.DEBUG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
