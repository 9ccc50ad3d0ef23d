"""Relation and attribute statistics."""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

EMPTY_RELATION_NAME = "<Empty>"


@dataclass(frozen=True)
class Attribute:
    """Attribute name with its distinct-value count.

    Two attributes are equal when their names match; the value count is
    statistics carried along and takes no part in lookups.
    """

    name: str
    value_count: int = field(default=0, compare=False)

    def with_value_count(self, value_count: int) -> "Attribute":
        """Return a copy of this attribute with a different value count."""
        return Attribute(self.name, value_count)

    def render(self) -> str:
        return f"{self.name},{self.value_count}"

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Attribute({self.name}, V={self.value_count})"


AttributeRef = Union[Attribute, str]


def _attribute_name(attribute: AttributeRef) -> str:
    if isinstance(attribute, Attribute):
        return attribute.name
    return attribute


class Relation:
    """Unnamed relation: a tuple count and an ordered list of attributes."""

    def __init__(
        self,
        tuple_count: int,
        attributes: Optional[Iterable[Attribute]] = None,
    ):
        """Initialize relation.

        Args:
            tuple_count: Estimated number of tuples
            attributes: Attributes to add, clamped on insertion
        """
        if tuple_count < 0:
            raise ValueError(f"Tuple count must not be negative: {tuple_count}")
        self.tuple_count = tuple_count
        self.attributes: List[Attribute] = []
        for attribute in attributes or []:
            self.add_attribute(attribute)

    def add_attribute(self, attribute: Attribute) -> None:
        """Append an attribute, capping its value count at the tuple count."""
        if attribute.value_count > self.tuple_count:
            attribute = attribute.with_value_count(self.tuple_count)
        self.attributes.append(attribute)

    def get_attribute(self, attribute: AttributeRef) -> Optional[Attribute]:
        """Get the first attribute matching a name or attribute template."""
        name = _attribute_name(attribute)
        for candidate in self.attributes:
            if candidate.name == name:
                return candidate
        return None

    def has_attribute(self, attribute: AttributeRef) -> bool:
        return self.get_attribute(attribute) is not None

    def attribute_names(self) -> List[str]:
        return [attribute.name for attribute in self.attributes]

    def copy(self) -> "Relation":
        """Return an unnamed copy of these statistics."""
        return Relation(self.tuple_count, self.attributes)

    def render(self) -> str:
        """Render statistics in catalogue syntax, e.g. ``50:a,50:b,10``."""
        parts = [str(self.tuple_count)]
        parts.extend(attribute.render() for attribute in self.attributes)
        return ":".join(parts)

    def _statistics(self):
        entries = sorted((a.name, a.value_count) for a in self.attributes)
        return self.tuple_count, entries

    def __eq__(self, other) -> bool:
        if not isinstance(other, Relation):
            return NotImplemented
        return self._statistics() == other._statistics()

    __hash__ = None

    def __repr__(self) -> str:
        return f"Relation({self.render()})"


class NamedRelation(Relation):
    """Relation registered in the catalogue under a name."""

    def __init__(
        self,
        name: str,
        tuple_count: int,
        attributes: Optional[Iterable[Attribute]] = None,
    ):
        super().__init__(tuple_count, attributes)
        self.name = name

    def is_empty_placeholder(self) -> bool:
        return self.name == EMPTY_RELATION_NAME

    def render(self) -> str:
        return f"{self.name}:{super().render()}"

    def __eq__(self, other) -> bool:
        if isinstance(other, NamedRelation) and other.name != self.name:
            return False
        return super().__eq__(other)

    __hash__ = None

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"NamedRelation({self.render()})"


def empty_relation() -> NamedRelation:
    """Create the placeholder relation for subtrees that contribute nothing."""
    return NamedRelation(EMPTY_RELATION_NAME, 0)
