import sys
from typing import Optional

from loguru import logger

from elbuenmenu_admin.config import get_config

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[logger_name]}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

# (level, file) the sinks were last installed with
_installed: Optional[tuple[str, Optional[str]]] = None


class AppLogger:
    """Loguru setup for the dashboard.

    Streamlit reruns the script on every interaction, so sinks are only
    reinstalled when get_config().log_level or log_file change.
    """
    def __init__(self) -> None:
        global _installed
        config = get_config()
        wanted = (config.log_level.upper(), config.log_file)
        if _installed != wanted:
            logger.remove()
            logger.configure(extra={"logger_name": "elbuenmenu_admin"})
            logger.add(sink=sys.stderr, level=wanted[0], format=LOG_FORMAT)
            if config.log_file:
                logger.add(config.log_file, level=wanted[0], format=LOG_FORMAT, rotation="10 MB", colorize=False)
            _installed = wanted
        self.logger = logger

    def get_logger(self, name: Optional[str] = None):
        """Logger bound to a module name.

        Args:
            name (str, optional): Shown in each line instead of the package name.
        Returns:
            loguru.Logger: The configured logger.
        """
        if name:
            return self.logger.bind(logger_name=name)
        return self.logger


def get_logger(name: Optional[str] = None):
    return AppLogger().get_logger(name)
