"""Equality predicates used by selections and joins."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from .relation import Attribute


class Predicate(ABC):
    """Base class for equality predicates.

    Predicates compare by identity: the same condition written twice in a
    query is tracked as two separate predicates.
    """

    left: Attribute

    @abstractmethod
    def attributes(self) -> List[Attribute]:
        """Return the attributes this predicate references."""
        pass

    @abstractmethod
    def equals_value(self) -> bool:
        """Return True for predicates of the form attr=value."""
        pass


@dataclass(frozen=True, eq=False)
class AttrEqAttr(Predicate):
    """Predicate of the form attr=attr."""

    left: Attribute
    right: Attribute

    def attributes(self) -> List[Attribute]:
        return [self.left, self.right]

    def equals_value(self) -> bool:
        return False

    def is_same_name(self) -> bool:
        """True when both sides name the same attribute (``a=a``)."""
        return self.left.name == self.right.name

    def swapped(self) -> "AttrEqAttr":
        return AttrEqAttr(self.right, self.left)

    def __str__(self) -> str:
        return f"{self.left.name}={self.right.name}"

    def __repr__(self) -> str:
        return f"AttrEqAttr({self})"


@dataclass(frozen=True, eq=False)
class AttrEqValue(Predicate):
    """Predicate of the form attr="value".

    The literal is only used for display; estimation ignores it.
    """

    left: Attribute
    value: str

    def attributes(self) -> List[Attribute]:
        return [self.left]

    def equals_value(self) -> bool:
        return True

    def __str__(self) -> str:
        return f'{self.left.name}="{self.value}"'

    def __repr__(self) -> str:
        return f"AttrEqValue({self})"
