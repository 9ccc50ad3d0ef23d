"""Cardinality estimation and heuristic optimisation of relational-algebra plans."""

__version__ = "0.1.0"
