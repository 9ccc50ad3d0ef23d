"""Catalogue of named relations."""

from .catalogue import Catalogue, CatalogueError
from .loader import CatalogueParser, load_catalogue

__all__ = ["Catalogue", "CatalogueError", "CatalogueParser", "load_catalogue"]
