"""Cardinality estimation and heuristic plan optimisation."""

from .estimator import Estimator, EstimationError
from .context import OptimiserContext, RequiredAttributes
from .join_ordering import JoinCandidate, JoinOrderSearch
from .optimiser import Optimiser

__all__ = [
    "Estimator",
    "EstimationError",
    "OptimiserContext",
    "RequiredAttributes",
    "JoinCandidate",
    "JoinOrderSearch",
    "Optimiser",
]
