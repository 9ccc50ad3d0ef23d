"""Query parsing."""

from .parser import QueryParser

__all__ = ["QueryParser"]
