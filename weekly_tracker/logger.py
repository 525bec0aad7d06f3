# weekly_tracker/logger.py
import logging
import logging.config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(log_level: str = "INFO") -> None:
    """Configure the root logger once per process.

    Streamlit re-executes the app script on every interaction, so this is
    called from the script body and must be safe to repeat.
    """
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "loggers": {
            "weekly_tracker": {
                "level": log_level.upper(),
                "handlers": ["console"],
                "propagate": False,
            },
        },
    })
