"""
utils/logger.py
---------------
Shared stdout logger factory for the planner.
"""

import logging
import sys

import config

__all__ = ["get_logger"]


def get_logger(name: str = "tripbudget") -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(config.LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(config.LOG_LEVEL)
        logger.propagate = False
    return logger
