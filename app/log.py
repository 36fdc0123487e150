import logging

from app.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """
    Configure the root logger once at application startup.

    ``force=True`` replaces handlers left on the root logger by an earlier
    ``basicConfig`` call (e.g. from a script that imported the app).
    """
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
        force=True,
    )
