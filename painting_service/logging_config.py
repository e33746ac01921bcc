"""
logging_config.py — Log Output of the Painting Order Service

Wizard and session events are written with their `[Wizard: <id>]` or
`[Session: <id>]` prefix, so one customer's order can be followed from
sign-in to submission in a single file.

Settings (environment):
    LOG_LEVEL   root log level (default INFO)
    LOG_FILE    file that receives a copy of everything written to stdout
                (default painting_orders.log)

Per-request lines from httpx/httpcore are dropped below WARNING; the
collaborator clients log their own failures.
"""

import logging
import os
import sys

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FILE = os.environ.get("LOG_FILE", "painting_orders.log")


def setup_logging():
    """
    Installs the root handlers once, at import of the API module.
    Lines carry time, level, PID and logger name, so output from several
    uvicorn workers sharing LOG_FILE stays attributable.
    """
    log_format = '%(asctime)s - %(levelname)s - [PID:%(process)d] - %(name)s - %(message)s'

    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format=log_format,
        handlers=[
            # File output
            logging.FileHandler(LOG_FILE),
            # Console output (stdout, Docker-compatible)
            logging.StreamHandler(sys.stdout)
        ]
    )

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name):
    """Named logger under the root handlers installed by `setup_logging()`."""
    return logging.getLogger(name)
