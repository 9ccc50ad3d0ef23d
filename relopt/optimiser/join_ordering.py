"""Greedy join ordering over a chain of cartesian products.

The search flattens a Product chain into independently optimised leaves,
turns pending ``attr=attr`` predicates into join candidates between the
leaves that provide their attributes, and then repeatedly materialises the
candidate with the smallest estimated output::

    Pending predicates              Candidates
    ------------------              ----------
      A.a = B.b                     JOIN (A, B)   T = 1000
      B.b = C.c                     JOIN (B, C)   T = 40

JOIN (B, C) is built first; the outstanding JOIN (A, B) then resolves B to
the new node and becomes JOIN (A, JOIN (B, C)).

Leaves live in an arena addressed by integer handles. Combining two
components records a redirect from each to the new node, so every
outstanding candidate follows the redirect instead of being rewritten.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from ..plan.logical import Join, LogicalPlanNode, Product, Scan, Select
from ..plan.predicates import AttrEqAttr
from ..plan.relation import Attribute
from .context import OptimiserContext

if TYPE_CHECKING:
    from .optimiser import Optimiser

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class JoinCandidate:
    """A pair of components that could be combined next.

    ``predicate`` is None for a plain cartesian product.
    """

    left: int
    right: int
    predicate: Optional[AttrEqAttr] = None

    def is_product(self) -> bool:
        return self.predicate is None

    def tie_key(self) -> Tuple[bool, str]:
        """Order among equally cheap candidates: joins by predicate text, then products."""
        if self.predicate is None:
            return True, ""
        return False, str(self.predicate)


class JoinOrderSearch:
    """Runs one join-ordering search over a Product or Join subtree."""

    def __init__(self, optimiser: "Optimiser", context: OptimiserContext):
        """Initialize search.

        Args:
            optimiser: Optimiser used to rewrite leaves and add projections
            context: State of the optimisation run this search belongs to
        """
        self.optimiser = optimiser
        self.context = context
        self.nodes: List[LogicalPlanNode] = []
        self.redirects: Dict[int, int] = {}

    def run(self, plan: LogicalPlanNode) -> LogicalPlanNode:
        """Rewrite a Product/Join subtree into an ordered join tree.

        Args:
            plan: Root of the subtree; must be a Product or a Join

        Returns:
            The optimised subtree
        """
        leaves = self._flatten(plan)
        if not leaves:
            logger.debug(f"No leaf of {plan!r} contributes to the result")
            return self.optimiser.empty_scan()

        self._apply_self_joins(leaves)
        leaves = [h for h in leaves if self.nodes[h].output.tuple_count > 0]
        if not leaves:
            return self.optimiser.empty_scan()

        candidates, paired = self._join_candidates(leaves)
        candidates.extend(self._product_candidates(leaves, paired))
        if len(leaves) == 1 and not candidates:
            return self.nodes[leaves[0]]
        return self._reduce(leaves, candidates)

    def _flatten(self, plan: LogicalPlanNode) -> List[int]:
        """Collect and optimise the leaves under a Product chain, left to right."""
        if isinstance(plan, Join):
            self.context.defer_join(plan.predicate)

        leaves: List[int] = []
        stack: List[LogicalPlanNode] = [plan]
        while stack:
            node = stack.pop()
            if isinstance(node, Product) or node is plan:
                stack.append(node.right)
                stack.append(node.left)
                continue

            optimised = self.optimiser.rewrite(node, self.context)
            if optimised.output.tuple_count == 0:
                logger.debug(f"Discarding leaf {optimised!r} with no tuples")
                continue
            leaves.append(self._add_node(optimised))
        return leaves

    def _apply_self_joins(self, leaves: List[int]) -> None:
        """Turn predicates satisfied entirely within one leaf into selections."""
        for predicate in sorted(self.context.pending_joins, key=str):
            if predicate.is_same_name():
                continue
            for handle in leaves:
                if self._provides(handle, predicate.left) and self._provides(
                    handle, predicate.right
                ):
                    node = self.optimiser.estimate(Select(self.nodes[handle], predicate))
                    self.context.place_join(predicate)
                    self.nodes[handle] = self.optimiser.add_required_projections(
                        node, self.context
                    )
                    break

    def _join_candidates(
        self, leaves: List[int]
    ) -> Tuple[List[JoinCandidate], List[int]]:
        """Pair leaves through pending predicates that span two of them."""
        candidates: List[JoinCandidate] = []
        paired: List[int] = []
        for predicate in list(self.context.pending_joins):
            left_holders = [h for h in leaves if self._provides(h, predicate.left)]
            if predicate.is_same_name():
                if len(left_holders) < 2:
                    continue
                pair = (left_holders[0], left_holders[1])
            else:
                right_holders = [
                    h for h in leaves if self._provides(h, predicate.right)
                ]
                if not left_holders or not right_holders:
                    continue
                pair = (left_holders[0], right_holders[0])

            self.context.claim_join(predicate)
            candidates.append(JoinCandidate(pair[0], pair[1], predicate))
            for handle in pair:
                if handle not in paired:
                    paired.append(handle)
        return candidates, paired

    def _product_candidates(
        self, leaves: List[int], paired: List[int]
    ) -> List[JoinCandidate]:
        """Pair every leaf without a join predicate with every other leaf."""
        candidates: List[JoinCandidate] = []
        others = list(leaves)
        for handle in leaves:
            if handle in paired:
                continue
            others.remove(handle)
            for other in others:
                candidates.append(JoinCandidate(handle, other))
        return candidates

    def _reduce(
        self, leaves: List[int], candidates: List[JoinCandidate]
    ) -> LogicalPlanNode:
        """Materialise the cheapest candidate until one component remains."""
        while True:
            candidates = self._prune(candidates)
            if not candidates:
                roots = self._live_roots(leaves)
                if not roots:
                    return self.optimiser.empty_scan()
                if len(roots) == 1:
                    return self.nodes[roots[0]]
                logger.debug(f"Combining {len(roots)} disconnected components")
                candidates = [
                    JoinCandidate(left, right)
                    for left, right in itertools.combinations(roots, 2)
                ]
                continue

            best, node = self._cheapest(candidates)
            candidates.remove(best)
            self._materialise(best, node)

    def _prune(self, candidates: List[JoinCandidate]) -> List[JoinCandidate]:
        """Drop candidates whose sides were already combined or eliminated.

        Join candidates inside a single component become selections on it,
        applied in predicate text order.
        """
        remaining: List[JoinCandidate] = []
        collapsed: List[JoinCandidate] = []
        for candidate in candidates:
            left = self.resolve(candidate.left)
            right = self.resolve(candidate.right)
            if self._is_eliminated(left) or self._is_eliminated(right):
                continue
            if left != right:
                remaining.append(candidate)
            elif not candidate.is_product():
                collapsed.append(candidate)

        if not collapsed:
            return remaining
        for candidate in sorted(collapsed, key=JoinCandidate.tie_key):
            self._select_within(self.resolve(candidate.left), candidate.predicate)
        # a selection can leave its component with nothing required
        return self._prune(remaining)

    def _select_within(self, handle: int, predicate: AttrEqAttr) -> None:
        """Apply a join predicate whose sides ended up in the same component."""
        node = self.optimiser.estimate(Select(self.nodes[handle], predicate))
        self.context.release_join(predicate)
        node = self.optimiser.add_required_projections(node, self.context)
        self._redirect(handle, self._add_node(node))

    def _cheapest(
        self, candidates: List[JoinCandidate]
    ) -> Tuple[JoinCandidate, LogicalPlanNode]:
        """Cost every candidate and return the cheapest.

        Equally cheap candidates are ordered by ``JoinCandidate.tie_key``, so
        the choice does not depend on the order predicates were deferred in.
        """
        best: Optional[JoinCandidate] = None
        best_node: Optional[LogicalPlanNode] = None
        for candidate in candidates:
            node = self._build(candidate)
            logger.debug(
                f"Candidate {node!r} estimated at {node.output.tuple_count} tuples"
            )
            if best_node is None or (node.output.tuple_count, candidate.tie_key()) < (
                best_node.output.tuple_count,
                best.tie_key(),
            ):
                best, best_node = candidate, node
            if not self.optimiser.config.enable_join_reordering:
                break
        return best, best_node

    def _build(self, candidate: JoinCandidate) -> LogicalPlanNode:
        left = self.nodes[self.resolve(candidate.left)]
        right = self.nodes[self.resolve(candidate.right)]
        if candidate.is_product():
            return self.optimiser.estimate(Product(left, right))

        predicate = candidate.predicate
        if not left.output.has_attribute(predicate.left) and left.output.has_attribute(
            predicate.right
        ):
            predicate = predicate.swapped()
        return self.optimiser.estimate(Join(left, right, predicate))

    def _materialise(self, candidate: JoinCandidate, node: LogicalPlanNode) -> None:
        logger.debug(f"Materialising {node!r} ({node.output.tuple_count} tuples)")
        if not candidate.is_product():
            self.context.release_join(candidate.predicate)
        combined = self.optimiser.add_required_projections(node, self.context)
        handle = self._add_node(combined)
        self._redirect(candidate.left, handle)
        self._redirect(candidate.right, handle)

    def _add_node(self, node: LogicalPlanNode) -> int:
        self.nodes.append(node)
        return len(self.nodes) - 1

    def resolve(self, handle: int) -> int:
        """Follow redirects to the node that currently owns a handle."""
        root = handle
        while root in self.redirects:
            root = self.redirects[root]
        while handle != root:
            next_handle = self.redirects[handle]
            self.redirects[handle] = root
            handle = next_handle
        return root

    def _redirect(self, handle: int, target: int) -> None:
        root = self.resolve(handle)
        if root != target:
            self.redirects[root] = target

    def _live_roots(self, leaves: List[int]) -> List[int]:
        roots: List[int] = []
        for handle in leaves:
            root = self.resolve(handle)
            if root not in roots and not self._is_eliminated(root):
                roots.append(root)
        return roots

    def _provides(self, handle: int, attribute: Attribute) -> bool:
        return self.nodes[self.resolve(handle)].output.has_attribute(attribute)

    def _is_eliminated(self, handle: int) -> bool:
        """True for components replaced by the empty placeholder."""
        node = self.nodes[handle]
        return isinstance(node, Scan) and node.relation.is_empty_placeholder()
