"""Core daydev-utils utilities.

This module exports settings and the logging façade for use throughout the
library and by consuming services.
"""

from daydev_utils.core.config import Settings, get_settings
from daydev_utils.core.logging import (
    attach_request,
    configure_logging,
    from_context,
    get_logger,
    log_error,
    logger_context,
    must,
    new,
    new_development,
    new_production,
    replace_globals,
    reset_context,
    std_logger,
    std_writer,
    sync,
    with_context,
    with_fields,
)

__all__ = [
    "Settings",
    "get_settings",
    "attach_request",
    "configure_logging",
    "from_context",
    "get_logger",
    "log_error",
    "logger_context",
    "must",
    "new",
    "new_development",
    "new_production",
    "replace_globals",
    "reset_context",
    "std_logger",
    "std_writer",
    "sync",
    "with_context",
    "with_fields",
]
