import logging
import sys

from app.settings import settings

LOGGER_NAME = "chamados_api"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(name: str = LOGGER_NAME) -> logging.Logger:
    """
    Configures the application logger once: a stdout handler, DEBUG level
    when settings.DEBUG is on and INFO otherwise.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    # the root logger may also carry a handler when run under uvicorn
    logger.propagate = False
    return logger


logger = setup_logging()
