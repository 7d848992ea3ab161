"""Utility functions for sf-deploy"""

from .async_utils import run_async, run_in_loop

__all__ = [
    "run_async",
    "run_in_loop",
]
