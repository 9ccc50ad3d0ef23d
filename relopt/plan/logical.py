"""Logical plan nodes."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from .predicates import AttrEqAttr, Predicate
from .relation import Attribute, NamedRelation, Relation


class LogicalPlanNode(ABC):
    """Base class for logical plan nodes.

    ``output`` holds the node's estimated statistics. It stays None until
    the estimator has visited the node.
    """

    output: Optional[Relation]

    @abstractmethod
    def children(self) -> List["LogicalPlanNode"]:
        """Return child nodes."""
        pass

    @abstractmethod
    def accept(self, visitor):
        """Accept a visitor for the visitor pattern."""
        pass

    def is_estimated(self) -> bool:
        return self.output is not None

    def tuple_count(self) -> int:
        """Estimated tuple count; the node must have been estimated."""
        if self.output is None:
            raise ValueError(f"{self!r} has not been estimated")
        return self.output.tuple_count

    def __repr__(self) -> str:
        return self.__class__.__name__


@dataclass(eq=False)
class Scan(LogicalPlanNode):
    """Scan a named relation from the catalogue."""

    relation: NamedRelation
    output: Optional[Relation] = field(default=None, init=False, repr=False)

    def children(self) -> List[LogicalPlanNode]:
        return []

    def accept(self, visitor):
        return visitor.visit_scan(self)

    def __str__(self) -> str:
        return str(self.relation)

    def __repr__(self) -> str:
        return f"Scan({self.relation.name})"


@dataclass(eq=False)
class Select(LogicalPlanNode):
    """Filter tuples with an equality predicate."""

    input: LogicalPlanNode
    predicate: Predicate
    output: Optional[Relation] = field(default=None, init=False, repr=False)

    def children(self) -> List[LogicalPlanNode]:
        return [self.input]

    def accept(self, visitor):
        return visitor.visit_select(self)

    def __str__(self) -> str:
        return f"SELECT [{self.predicate}] ({self.input})"

    def __repr__(self) -> str:
        return f"Select({self.predicate})"


@dataclass(eq=False)
class Project(LogicalPlanNode):
    """Project onto a list of attributes."""

    input: LogicalPlanNode
    attributes: List[Attribute]
    output: Optional[Relation] = field(default=None, init=False, repr=False)

    def children(self) -> List[LogicalPlanNode]:
        return [self.input]

    def accept(self, visitor):
        return visitor.visit_project(self)

    def attribute_names(self) -> List[str]:
        return [attribute.name for attribute in self.attributes]

    def __str__(self) -> str:
        names = ",".join(self.attribute_names())
        return f"PROJECT [{names}] ({self.input})"

    def __repr__(self) -> str:
        return f"Project({len(self.attributes)} attributes)"


@dataclass(eq=False)
class Product(LogicalPlanNode):
    """Cartesian product of two inputs."""

    left: LogicalPlanNode
    right: LogicalPlanNode
    output: Optional[Relation] = field(default=None, init=False, repr=False)

    def children(self) -> List[LogicalPlanNode]:
        return [self.left, self.right]

    def accept(self, visitor):
        return visitor.visit_product(self)

    def __str__(self) -> str:
        return f"({self.left}) TIMES ({self.right})"

    def __repr__(self) -> str:
        return "Product"


@dataclass(eq=False)
class Join(LogicalPlanNode):
    """Equi-join of two inputs."""

    left: LogicalPlanNode
    right: LogicalPlanNode
    predicate: AttrEqAttr
    output: Optional[Relation] = field(default=None, init=False, repr=False)

    def children(self) -> List[LogicalPlanNode]:
        return [self.left, self.right]

    def accept(self, visitor):
        return visitor.visit_join(self)

    def __str__(self) -> str:
        return f"({self.left}) JOIN [{self.predicate}] ({self.right})"

    def __repr__(self) -> str:
        return f"Join({self.predicate})"


class PlanVisitor(ABC):
    """Visitor interface for logical plan nodes."""

    @abstractmethod
    def visit_scan(self, node: Scan):
        pass

    @abstractmethod
    def visit_select(self, node: Select):
        pass

    @abstractmethod
    def visit_project(self, node: Project):
        pass

    @abstractmethod
    def visit_product(self, node: Product):
        pass

    @abstractmethod
    def visit_join(self, node: Join):
        pass
