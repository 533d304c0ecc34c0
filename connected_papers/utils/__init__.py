"""
connected-papers utilities module.
"""

from connected_papers.utils.config import get_apis_config, get_project_root, get_settings
from connected_papers.utils.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)

__all__ = [
    "get_settings",
    "get_apis_config",
    "get_project_root",
    "get_logger",
    "configure_logging",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
