"""Utility modules for filemeta.

This module exports commonly used utility functions.
"""

from filemeta.utils.formatting import (
    console,
    err_console,
    print_error,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "err_console",
    "print_error",
    "print_success",
    "print_warning",
]
