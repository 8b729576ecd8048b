"""
splashlink package initializer.
"""

from . import assets
from . import manager
from . import storage

__all__ = ["assets", "manager", "storage"]
