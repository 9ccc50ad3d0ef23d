"""Heuristic plan optimiser."""

import logging
from typing import List, Optional

from ..config.config import OptimizerConfig
from ..plan.logical import (
    Join,
    LogicalPlanNode,
    Product,
    Project,
    Scan,
    Select,
)
from ..plan.relation import Attribute, empty_relation
from .context import OptimiserContext
from .estimator import Estimator
from .join_ordering import JoinOrderSearch

logger = logging.getLogger(__name__)


class Optimiser:
    """Rewrites a canonical plan into a cheaper equivalent.

    Selections are pushed down to the scans they constrain, cartesian
    products are turned into joins ordered greedily by estimated output
    size, and projections are inserted wherever attributes stop being
    needed further up the plan.
    """

    def __init__(self, config: Optional[OptimizerConfig] = None):
        """Initialize optimiser.

        Args:
            config: Optimiser settings; defaults enable every rewrite
        """
        self.config = config or OptimizerConfig()
        self.estimator = Estimator()

    def optimise(self, plan: LogicalPlanNode) -> LogicalPlanNode:
        """Optimise a plan.

        Every call works on fresh state, so one instance can optimise any
        number of plans.

        Args:
            plan: Canonical plan to optimise

        Returns:
            Optimised plan with estimated statistics on every node
        """
        context = OptimiserContext()
        result = self.rewrite(plan, context)

        unmatched = list(context.pending_selects)
        unmatched.extend(p for p in context.pending_joins if not p.is_same_name())
        if unmatched:
            names = ", ".join(str(p) for p in unmatched)
            logger.warning(f"Predicates {names} match no relation; result is empty")
            return self.empty_scan()

        logger.debug(f"Optimised plan {result!r} ({result.output.tuple_count} tuples)")
        return result

    def rewrite(
        self, node: LogicalPlanNode, context: OptimiserContext
    ) -> LogicalPlanNode:
        """Optimise one subtree within a running optimisation.

        Args:
            node: Subtree to rewrite
            context: State of the current run

        Returns:
            Estimated replacement for the subtree
        """
        if isinstance(node, Scan):
            return self._optimise_scan(node, context)
        if isinstance(node, Project):
            return self._optimise_project(node, context)
        if isinstance(node, Select):
            return self._optimise_select(node, context)
        if isinstance(node, (Product, Join)):
            return JoinOrderSearch(self, context).run(node)
        raise ValueError(f"Unsupported plan node: {type(node).__name__}")

    def _optimise_scan(self, node: Scan, context: OptimiserContext) -> LogicalPlanNode:
        relation = node.relation
        result = self.estimate(Scan(relation))

        for predicate in sorted(context.pending_selects, key=str):
            if relation.has_attribute(predicate.left):
                result = self.estimate(Select(result, predicate))
                context.place_select(predicate)

        for predicate in sorted(context.pending_joins, key=str):
            if predicate.is_same_name():
                continue
            if relation.has_attribute(predicate.left) and relation.has_attribute(
                predicate.right
            ):
                result = self.estimate(Select(result, predicate))
                context.place_join(predicate)

        return self.add_required_projections(result, context)

    def _optimise_project(
        self, node: Project, context: OptimiserContext
    ) -> LogicalPlanNode:
        for attribute in node.attributes:
            context.required.increment(attribute)

        auto_project = context.auto_project
        context.auto_project = self.config.enable_projection_pushdown
        result = self.rewrite(node.input, context)
        result = self.add_required_projections(result, context)
        context.auto_project = auto_project

        for attribute in node.attributes:
            context.required.decrement(attribute)
        return self._ensure_projection(result, node.attributes)

    def _optimise_select(
        self, node: Select, context: OptimiserContext
    ) -> LogicalPlanNode:
        if node.predicate.equals_value():
            context.defer_select(node.predicate)
        else:
            context.defer_join(node.predicate)
        return self.rewrite(node.input, context)

    def _ensure_projection(
        self, node: LogicalPlanNode, attributes: List[Attribute]
    ) -> LogicalPlanNode:
        """Return a Project onto exactly ``attributes`` over ``node``."""
        names = [attribute.name for attribute in attributes]
        if isinstance(node, Project) and node.attribute_names() == names:
            return node
        if isinstance(node, Project):
            node = node.input
        return self.estimate(Project(node, list(attributes)))

    def add_required_projections(
        self, node: LogicalPlanNode, context: OptimiserContext
    ) -> LogicalPlanNode:
        """Insert a minimal projection above a subtree if it carries extras.

        Args:
            node: Estimated subtree
            context: State of the current run

        Returns:
            ``node`` itself, a Project of its still-required attributes, or
            the empty placeholder when none of them are required
        """
        if not context.auto_project:
            return node

        output = node.output
        required = context.required.present_in(output)
        if not required:
            logger.debug(f"No attribute of {node!r} is required; replacing with empty")
            return self.empty_scan()
        if len(required) >= len(output.attributes):
            return node

        if isinstance(node, Project):
            node = node.input
        return self.estimate(Project(node, required))

    def estimate(self, node: LogicalPlanNode) -> LogicalPlanNode:
        """Estimate a node whose inputs are estimated and return it."""
        self.estimator.estimate(node)
        return node

    def empty_scan(self) -> Scan:
        """Estimated scan of the empty placeholder relation."""
        return self.estimate(Scan(empty_relation()))
