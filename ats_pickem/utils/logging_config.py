"""
Logging configuration for the ATS pick'em application

Everything runs from the CLI or from scheduler threads, so records are tagged
with the season and the thread that produced them instead of request data.
"""

import logging
import logging.handlers
import os
import threading

CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] [season %(season)s] [%(origin)s] %(name)s: %(message)s"
ERROR_FORMAT = FILE_FORMAT + " [%(pathname)s:%(lineno)d]"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SCHEDULER_LOGGER = "ats_pickem.services.scheduler_service"


class SeasonContextFilter(logging.Filter):
    """Add the configured season and the originating thread to log records"""

    def __init__(self, season):
        super().__init__()
        self.season = season

    def filter(self, record):
        record.season = self.season
        if threading.current_thread() is threading.main_thread():
            record.origin = "main"
        else:
            # APScheduler runs jobs on its own worker threads
            record.origin = threading.current_thread().name
        return True


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output"""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.COLORS.get(record.levelname)
        if not color:
            return super().format(record)

        # Color a copy so file handlers sharing the record stay plain
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


def _rotating_handler(path, level, fmt, max_mb, backups, context_filter):
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_mb * 1024 * 1024, backupCount=backups
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    handler.addFilter(context_filter)
    return handler


def setup_logging(app):
    """
    Setup logging for the application

    Console output is colored in debug mode. File logging writes three
    rotating files under LOG_DIR: everything, errors only, and the
    scheduler's own log.

    Args:
        app: Flask application instance
    """
    log_level = getattr(logging, app.config.get("LOG_LEVEL", "INFO").upper())
    context_filter = SeasonContextFilter(app.config.get("SEASON_YEAR"))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers to avoid duplicates when the app is recreated
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    scheduler_logger = logging.getLogger(SCHEDULER_LOGGER)
    for handler in scheduler_logger.handlers[:]:
        scheduler_logger.removeHandler(handler)

    if app.config.get("LOG_TO_CONSOLE", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        if app.debug:
            console_handler.setFormatter(
                ColoredFormatter(
                    CONSOLE_FORMAT + " [%(filename)s:%(lineno)d]", datefmt="%H:%M:%S"
                )
            )
        else:
            console_handler.setFormatter(
                logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT)
            )
        root_logger.addHandler(console_handler)

    if app.config.get("LOG_TO_FILE", True):
        log_dir = app.config.get("LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)

        root_logger.addHandler(
            _rotating_handler(
                os.path.join(log_dir, "ats_pickem.log"),
                log_level,
                FILE_FORMAT,
                max_mb=10,
                backups=5,
                context_filter=context_filter,
            )
        )
        root_logger.addHandler(
            _rotating_handler(
                os.path.join(log_dir, "errors.log"),
                logging.ERROR,
                ERROR_FORMAT,
                max_mb=5,
                backups=3,
                context_filter=context_filter,
            )
        )
        # Sync job history, on top of the shared files
        scheduler_logger.addHandler(
            _rotating_handler(
                os.path.join(log_dir, "scheduler.log"),
                logging.INFO,
                FILE_FORMAT,
                max_mb=5,
                backups=3,
                context_filter=context_filter,
            )
        )

    # Quiet chatty third-party loggers
    for name in ("urllib3", "requests", "sqlalchemy.engine"):
        logging.getLogger(name).setLevel(logging.WARNING)

    # Set APScheduler logging to WARNING to reduce verbosity (change to INFO for debugging)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    app.logger.info(f"Logging configured - Level: {logging.getLevelName(log_level)}")


def get_logger(name):
    """Get a logger instance with the specified name (usually __name__)"""
    return logging.getLogger(name)


class ContextualLogger(logging.LoggerAdapter):
    """
    Logger that appends key=value context to every message

        log = ContextualLogger(__name__, {"user_id": 7, "scope": 3})
        log.info("Pick submission")  # "Pick submission [user_id=7 scope=3]"
    """

    def __init__(self, name, context=None):
        super().__init__(get_logger(name), context or {})

    def process(self, msg, kwargs):
        if self.extra:
            context_str = " ".join(f"{k}={v}" for k, v in self.extra.items())
            msg = f"{msg} [{context_str}]"
        return msg, kwargs
