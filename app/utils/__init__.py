from app.utils.logging_config import logger

__all__ = ["logger"]
