"""
Employee read operations built on the reference cache.
"""

from .directory import EmployeeDirectory

__all__ = ["EmployeeDirectory"]
