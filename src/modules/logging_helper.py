import logging
import os
from typing import Dict

from quart.logging import default_handler

CONSOLE_HANDLER_NAME = "todo-console"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_level(level: str) -> int:
    """Convert a level name such as ``debug`` to its numeric value."""
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")
    return numeric_level


class LoggingHelper:
    """Helper class for setting up logging.

    The level comes from the ``LOG_LEVEL`` config value. Individual loggers
    can be overriden using envvars, e.g.:
    SQLALCHEMY_LOG_LEVEL=INFO
    """

    def __init__(self, app=None):
        """Initialise the LoggingHelper.

        Args:
            app (Quart, optional): The Quart application instance.
        """
        self._enabled_loggers: Dict[str, str] = {}
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Initialize logging configuration.

        Sets up the root logger with a single console handler shared by the
        application, the store modules and any library loggers.
        """
        log_level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
        numeric_level = parse_level(log_level)

        root_logger = logging.getLogger()
        root_logger.setLevel(numeric_level)

        # Repeated app creation (tests) must not stack handlers
        if not any(
            handler.get_name() == CONSOLE_HANDLER_NAME
            for handler in root_logger.handlers
        ):
            console_handler = logging.StreamHandler()
            console_handler.set_name(CONSOLE_HANDLER_NAME)
            console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root_logger.addHandler(console_handler)

        # Configure Quart app logger
        app.logger.removeHandler(default_handler)
        app.logger.setLevel(numeric_level)

        self._configure_third_party_loggers(app)
        self._load_enabled_loggers(app)

        app.extensions["logging_helper"] = self
        app.logger.info(f"Logging initialised with level: {log_level}")

    def _configure_third_party_loggers(self, app):
        """Set every logger outside the app and its packages to WARNING."""
        own_prefixes = (app.name, "src")
        for name in logging.root.manager.loggerDict:
            if any(name == p or name.startswith(f"{p}.") for p in own_prefixes):
                continue
            logging.getLogger(name).setLevel(logging.WARNING)

    def _load_enabled_loggers(self, app):
        """Load explicitly configured loggers from environment."""
        for key, value in os.environ.items():
            if key.endswith("_LOG_LEVEL"):
                logger_name = key[:-10].lower()  # Remove _LOG_LEVEL suffix
                self.set_logger_level(app, logger_name, value)

    def set_logger_level(self, app, logger_name: str, level: str):
        """Set log level for a specific logger.

        Args:
            logger_name: Name of the logger
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        logger = logging.getLogger(logger_name)
        logger.setLevel(parse_level(level))
        self._enabled_loggers[logger_name] = level
        app.logger.info(f"Set {logger_name} log level to {level}")
