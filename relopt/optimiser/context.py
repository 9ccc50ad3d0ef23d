"""Per-run optimiser state."""

from dataclasses import dataclass, field
from typing import Dict, List

from ..plan.predicates import AttrEqAttr, AttrEqValue
from ..plan.relation import Attribute, Relation


class RequiredAttributes:
    """Reference counts of attributes still needed above the current subtree.

    A count goes up each time a projection or predicate asks for the
    attribute and down once that use has been placed in the plan.
    """

    def __init__(self):
        self.counts: Dict[str, int] = {}

    def increment(self, attribute: Attribute) -> None:
        self.counts[attribute.name] = self.counts.get(attribute.name, 0) + 1

    def decrement(self, attribute: Attribute) -> None:
        current = self.counts.get(attribute.name, 0)
        self.counts[attribute.name] = max(0, current - 1)

    def count(self, attribute: Attribute) -> int:
        return self.counts.get(attribute.name, 0)

    def is_required(self, attribute: Attribute) -> bool:
        return self.count(attribute) > 0

    def present_in(self, relation: Relation) -> List[Attribute]:
        """Required attributes of a relation, in its order, without duplicates."""
        found: List[Attribute] = []
        for attribute in relation.attributes:
            if self.is_required(attribute) and attribute not in found:
                found.append(attribute)
        return found

    def __repr__(self) -> str:
        live = {name: count for name, count in self.counts.items() if count}
        return f"RequiredAttributes({live})"


@dataclass
class OptimiserContext:
    """Mutable state owned by a single ``Optimiser.optimise`` call."""

    pending_selects: List[AttrEqValue] = field(default_factory=list)
    pending_joins: List[AttrEqAttr] = field(default_factory=list)
    required: RequiredAttributes = field(default_factory=RequiredAttributes)
    auto_project: bool = False

    def defer_select(self, predicate: AttrEqValue) -> None:
        self.required.increment(predicate.left)
        self.pending_selects.append(predicate)

    def defer_join(self, predicate: AttrEqAttr) -> None:
        self.required.increment(predicate.left)
        self.required.increment(predicate.right)
        self.pending_joins.append(predicate)

    def place_select(self, predicate: AttrEqValue) -> None:
        """Drop a value predicate that now sits in the plan."""
        self.pending_selects.remove(predicate)
        self.required.decrement(predicate.left)

    def claim_join(self, predicate: AttrEqAttr) -> None:
        """Take a join predicate off the pending list for the join search."""
        self.pending_joins.remove(predicate)

    def release_join(self, predicate: AttrEqAttr) -> None:
        """Release the attributes of a join predicate that now sits in the plan."""
        self.required.decrement(predicate.left)
        self.required.decrement(predicate.right)

    def place_join(self, predicate: AttrEqAttr) -> None:
        self.claim_join(predicate)
        self.release_join(predicate)
