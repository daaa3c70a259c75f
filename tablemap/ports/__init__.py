"""Public port exports for concrete adapter implementations."""

from .db_api import Database

__all__ = ["Database"]
