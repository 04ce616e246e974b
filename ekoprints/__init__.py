"""Mini README: Core package initializer for the EKO Prints back office.

This module exposes convenience imports that allow other parts of the
application to access shared helpers without needing to know the exact
module structure. The task board and expense ledger live in their own
subpackages so they can be imported without pulling in the web framework.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
