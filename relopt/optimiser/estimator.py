"""Cardinality estimation for logical plans.

Notation used below: T(R) is the tuple count of relation R and V(R, A) the
number of distinct values of attribute A in R. All divisions are floor
divisions, and a zero denominator yields zero tuples.
"""

from typing import List, Optional, Tuple

from ..plan.logical import (
    Join,
    LogicalPlanNode,
    PlanVisitor,
    Product,
    Project,
    Scan,
    Select,
)
from ..plan.predicates import AttrEqAttr
from ..plan.relation import Attribute, Relation


class EstimationError(Exception):
    """Raised when a node is estimated before its inputs."""

    pass


def _divide(numerator: int, denominator: int) -> int:
    if denominator == 0:
        return 0
    return numerator // denominator


def _degraded(relation: Relation) -> Relation:
    """Zero-tuple relation carrying the input's attributes."""
    return Relation(0, relation.attributes)


class Estimator(PlanVisitor):
    """Computes each node's output statistics from its inputs' outputs."""

    def estimate(self, node: LogicalPlanNode) -> Relation:
        """Estimate a single node whose inputs are already estimated.

        Args:
            node: Plan node to estimate

        Returns:
            The node's output statistics, also stored on ``node.output``

        Raises:
            EstimationError: If an input has not been estimated
        """
        for child in node.children():
            if child.output is None:
                raise EstimationError(
                    f"Input {child!r} of {node!r} has not been estimated"
                )
        node.accept(self)
        return node.output

    def estimate_plan(self, plan: LogicalPlanNode) -> Relation:
        """Estimate every node of a plan, inputs before parents."""
        stack: List[Tuple[LogicalPlanNode, bool]] = [(plan, False)]
        while stack:
            node, expanded = stack.pop()
            if expanded:
                self.estimate(node)
                continue
            stack.append((node, True))
            for child in reversed(node.children()):
                stack.append((child, False))
        return plan.output

    def visit_scan(self, node: Scan) -> None:
        """T(O) = T(R), attributes copied verbatim."""
        node.output = node.relation.copy()

    def visit_project(self, node: Project) -> None:
        """T(O) = T(R); unknown attributes are emitted with V = 0."""
        source = node.input.output
        output = Relation(source.tuple_count)
        for attribute in node.attributes:
            found = source.get_attribute(attribute)
            if found is None:
                output.add_attribute(Attribute(attribute.name, 0))
            else:
                output.add_attribute(found)
        node.output = output

    def visit_select(self, node: Select) -> None:
        """T(O) = T(R) / V(R, A) for A=value, T(R) / max(V(R, A), V(R, B)) for A=B."""
        source = node.input.output
        predicate = node.predicate
        left = source.get_attribute(predicate.left)
        if left is None:
            node.output = _degraded(source)
            return

        if predicate.equals_value():
            output = Relation(_divide(source.tuple_count, left.value_count))
            matched = {left.name: 1}
        else:
            right = source.get_attribute(predicate.right)
            if right is None:
                node.output = _degraded(source)
                return
            denominator = max(left.value_count, right.value_count)
            shared = min(left.value_count, right.value_count)
            output = Relation(_divide(source.tuple_count, denominator))
            matched = {left.name: shared, right.name: shared}

        for attribute in source.attributes:
            if attribute.name in matched:
                output.add_attribute(attribute.with_value_count(matched[attribute.name]))
            else:
                output.add_attribute(attribute)
        node.output = output

    def visit_product(self, node: Product) -> None:
        """T(O) = T(R) * T(S)."""
        left = node.left.output
        right = node.right.output
        output = Relation(left.tuple_count * right.tuple_count)
        for attribute in left.attributes + right.attributes:
            output.add_attribute(attribute)
        node.output = output

    def visit_join(self, node: Join) -> None:
        """T(O) = T(R) * T(S) / max(V(R, A), V(S, B))."""
        left = node.left.output
        right = node.right.output
        sides = self._resolve_join_sides(left, right, node.predicate)
        if sides is None:
            node.output = Relation(0, left.attributes + right.attributes)
            return

        left_attribute, right_attribute = sides
        left_count = left_attribute.value_count
        right_count = right_attribute.value_count
        shared = min(left_count, right_count)
        output = Relation(
            _divide(left.tuple_count * right.tuple_count, max(left_count, right_count))
        )
        self._add_join_attributes(output, left.attributes, left_attribute, shared)
        self._add_join_attributes(output, right.attributes, right_attribute, shared)
        node.output = output

    def _resolve_join_sides(
        self, left: Relation, right: Relation, predicate: AttrEqAttr
    ) -> Optional[Tuple[Attribute, Attribute]]:
        """Find the predicate's attributes on each input, trying both orientations."""
        for first, second in (
            (predicate.left, predicate.right),
            (predicate.right, predicate.left),
        ):
            left_attribute = left.get_attribute(first)
            right_attribute = right.get_attribute(second)
            if left_attribute is not None and right_attribute is not None:
                return left_attribute, right_attribute
        return None

    def _add_join_attributes(
        self,
        output: Relation,
        attributes: List[Attribute],
        join_attribute: Attribute,
        shared: int,
    ) -> None:
        for attribute in attributes:
            if attribute == join_attribute:
                output.add_attribute(attribute.with_value_count(shared))
            else:
                output.add_attribute(attribute)

    def __repr__(self) -> str:
        return "Estimator()"
