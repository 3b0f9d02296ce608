# File: utils/__init__.py
"""Pure Python utilities for Homeschool Assignments.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Submodules:
    - dt_utils: Calendar date parsing, comparison and formatting

Usage:
    from .utils import dt_utils
    from .utils.dt_utils import date_key, dt_today_local
"""

from . import dt_utils

__all__ = ["dt_utils"]
