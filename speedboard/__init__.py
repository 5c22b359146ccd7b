"""Speedboard package initialization.

Exports for testing and module access.
"""

from speedboard import lib, models

__all__ = ['lib', 'models']
