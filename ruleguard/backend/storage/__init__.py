"""storage/__init__.py"""
from .database import Database
from .repository import PolicyRepository

__all__ = ["Database", "PolicyRepository"]
