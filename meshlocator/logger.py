import os
from logging import config, getLogger
from typing import Any

LOGGER_NAME = "mesh_locator"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def build_log_config(level: str) -> dict[str, Any]:
    """dictConfig for the service logger, routed through uvicorn's formatters.

    Service lines and uvicorn's own lines share one stderr handler; access
    lines stay on stdout.
    """
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "service": {
                "()": "uvicorn.logging.DefaultFormatter",
                "fmt": "%(levelprefix)s %(asctime)s - %(name)s - %(message)s",
                "datefmt": DATE_FORMAT,
            },
            "access": {
                "()": "uvicorn.logging.AccessFormatter",
                "fmt": '%(levelprefix)s %(asctime)s - %(client_addr)s - "%(request_line)s" %(status_code)s',
                "datefmt": DATE_FORMAT,
            },
        },
        "handlers": {
            "stderr": {"class": "logging.StreamHandler", "formatter": "service", "stream": "ext://sys.stderr"},
            "stdout": {"class": "logging.StreamHandler", "formatter": "access", "stream": "ext://sys.stdout"},
        },
        "loggers": {
            LOGGER_NAME: {"handlers": ["stderr"], "level": level, "propagate": False},
            "uvicorn": {"handlers": ["stderr"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["stdout"], "level": level, "propagate": False},
        },
    }


config.dictConfig(build_log_config(os.getenv("LOG_LEVEL", "INFO")))

logger = getLogger(LOGGER_NAME)
