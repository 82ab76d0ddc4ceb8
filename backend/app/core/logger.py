import logging
import os
from logging.handlers import RotatingFileHandler
from app.core.config import settings

class LoggerConfig:
    """
    Logger configuration class to setup logging for the application.
    Errors go to error.log, everything at or above the configured level to
    combined.log, and outside production also to the console.
    """
    def __init__(
        self, env=20, logger_name="TripScout", log_directory="logs",
        error_file="error.log", combined_file="combined.log", console=True
    ):
        try:
            self.logger_name = logger_name
            self.log_directory = os.path.abspath(log_directory)
            self.error_file_path = os.path.join(self.log_directory, error_file)
            self.combined_file_path = os.path.join(self.log_directory, combined_file)
            self.env = env
            self.console = console
            self.log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

            self.logger = logging.getLogger(self.logger_name)
            self.setup_logger()
        except Exception as e:
            print(f"Failed to initialize logger: {str(e)}")

    def _file_handler(self, path: str, level: int) -> RotatingFileHandler:
        handler = RotatingFileHandler(
            path, backupCount=5, maxBytes=1024 * 1024 * 10, encoding="utf-8"
        )
        handler.setLevel(level)
        return handler

    def setup_logger(self):
        try:
            os.makedirs(self.log_directory, exist_ok=True)

            handlers = [
                self._file_handler(self.error_file_path, logging.ERROR),
                self._file_handler(self.combined_file_path, self.env),
            ]

            if self.console:
                console_handler = logging.StreamHandler()
                console_handler.setLevel(self.env)
                handlers.append(console_handler)

            formatter = logging.Formatter(self.log_format)
            for handler in handlers:
                handler.setFormatter(formatter)

            # Avoid adding duplicate handlers if re-initialized
            if not self.logger.hasHandlers():
                for handler in handlers:
                    self.logger.addHandler(handler)

            self.logger.setLevel(self.env)

        except Exception as e:
            print(f"Failed to setup logger handlers: {str(e)}")

    def log(self, level: int, message: str, extra: dict = None):
        """Simple wrapper to log messages"""
        if extra:
            message = f"{message} | {extra}"
        self.logger.log(level, message)

    def exception(self, message: str, extra: dict = None):
        """Log at ERROR with the active traceback attached."""
        if extra:
            message = f"{message} | {extra}"
        self.logger.error(message, exc_info=True)

# Initialize Logger
logs = LoggerConfig(
    env=settings.LOGGER,
    logger_name="APP-BE",
    log_directory=settings.LOG_DIRECTORY,
    console=not settings.is_production
)
