"""
Logging configuration for EyeGuard.
EyeGuard modules log through the standard logging module; the model
frameworks underneath are noisy and get silenced here.
"""

import logging
import os
import sys
import warnings

import absl.logging

LOGGERS_TO_DISABLE = [
    'mediapipe',
    'mediapipe.python',
    'tensorflow',
    'absl',
    'matplotlib',
    'PIL',
    'streamlit',
]

DEBUG = os.getenv("EYEGUARD_DEBUG", "0") in ("1", "true", "True")


def configure_logging(debug: bool = DEBUG) -> logging.Logger:
    """Attach a console handler to the root logger and silence third-party logs."""
    configure_silent_logging()

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)-28s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    return root


def configure_silent_logging():
    # Suppress framework warnings
    warnings.filterwarnings('ignore', module='mediapipe')
    warnings.filterwarnings('ignore', module='google.protobuf')

    for logger_name in LOGGERS_TO_DISABLE:
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.CRITICAL)
        logger.propagate = False

    # Environment variables for C++ logs
    os.environ.setdefault("GLOG_minloglevel", "3")
    os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "3")
    os.environ.setdefault("MEDIAPIPE_DISABLE_GPU", "1")

    absl.logging.set_verbosity(absl.logging.FATAL)
    absl.logging.use_absl_handler()
