"""Query plan representations and statistics."""

from .relation import (
    Attribute,
    Relation,
    NamedRelation,
    EMPTY_RELATION_NAME,
    empty_relation,
)
from .predicates import Predicate, AttrEqAttr, AttrEqValue
from .logical import (
    LogicalPlanNode,
    Scan,
    Select,
    Project,
    Product,
    Join,
    PlanVisitor,
)
from .explain import ExplainFormat, explain_plan

__all__ = [
    # Statistics
    "Attribute",
    "Relation",
    "NamedRelation",
    "EMPTY_RELATION_NAME",
    "empty_relation",
    # Predicates
    "Predicate",
    "AttrEqAttr",
    "AttrEqValue",
    # Logical nodes
    "LogicalPlanNode",
    "Scan",
    "Select",
    "Project",
    "Product",
    "Join",
    "PlanVisitor",
    # Explain
    "ExplainFormat",
    "explain_plan",
]
