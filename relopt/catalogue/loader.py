"""Loader for serialised catalogue files.

Each non-blank line describes one relation::

    <relation name>:<tuple count>:<attr name>,<value count>:<attr name>,<value count>
"""

import logging
from pathlib import Path
from typing import List, Optional

from .catalogue import Catalogue, CatalogueError

logger = logging.getLogger(__name__)


class CatalogueParser:
    """Populates a catalogue from serialised catalogue text."""

    def __init__(self, catalogue: Optional[Catalogue] = None):
        """Initialize parser.

        Args:
            catalogue: Catalogue to populate; a new one is created if omitted
        """
        self.catalogue = catalogue if catalogue is not None else Catalogue()

    def parse(self, text: str) -> Catalogue:
        """Parse catalogue text into the catalogue.

        Args:
            text: Serialised catalogue, one relation per line

        Returns:
            The populated catalogue

        Raises:
            CatalogueError: If a line is malformed
        """
        for line_number, line in enumerate(text.splitlines(), start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            self._parse_relation(stripped.split(":"), line_number)
        return self.catalogue

    def _parse_relation(self, parts: List[str], line_number: int) -> None:
        if len(parts) < 2:
            raise CatalogueError(
                f"Line {line_number}: expected '<relation>:<tuple count>'"
            )
        name = parts[0].strip()
        tuple_count = self._parse_count(parts[1], line_number)
        self.catalogue.create_relation(name, tuple_count)
        for part in parts[2:]:
            self._parse_attribute(name, part.split(","), line_number)

    def _parse_attribute(
        self, relation_name: str, parts: List[str], line_number: int
    ) -> None:
        if len(parts) != 2:
            raise CatalogueError(
                f"Line {line_number}: expected '<attribute>,<value count>'"
            )
        value_count = self._parse_count(parts[1], line_number)
        self.catalogue.create_attribute(relation_name, parts[0].strip(), value_count)

    def _parse_count(self, value: str, line_number: int) -> int:
        try:
            count = int(value.strip())
        except ValueError:
            raise CatalogueError(
                f"Line {line_number}: invalid count '{value.strip()}'"
            ) from None
        if count < 0:
            raise CatalogueError(f"Line {line_number}: negative count {count}")
        return count


def load_catalogue(catalogue_path: str) -> Catalogue:
    """Load a catalogue from a serialised catalogue file.

    Args:
        catalogue_path: Path to the catalogue file

    Returns:
        Populated catalogue
    """
    path = Path(catalogue_path)
    if not path.exists():
        raise FileNotFoundError(f"Catalogue file not found: {catalogue_path}")

    with open(path, "r") as f:
        catalogue = CatalogueParser().parse(f.read())

    logger.info(
        f"Loaded catalogue from {catalogue_path}: "
        f"{len(catalogue.relations)} relations, {len(catalogue.attributes)} attributes"
    )
    return catalogue
