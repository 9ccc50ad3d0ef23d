"""Explain output for estimated plans."""

import json
from enum import Enum
from typing import Any, Dict, List

from .logical import Join, LogicalPlanNode, Product, Project, Scan, Select


class ExplainFormat(Enum):
    """Supported EXPLAIN output formats."""

    TEXT = "TEXT"
    JSON = "JSON"


def explain_plan(
    plan: LogicalPlanNode, explain_format: ExplainFormat = ExplainFormat.TEXT
) -> str:
    """Describe a plan tree together with each node's estimated statistics.

    Args:
        plan: Root of the plan; nodes that were never estimated are shown
            without statistics
        explain_format: TEXT for an indented tree, JSON for a document

    Returns:
        Rendered explain output
    """
    if explain_format == ExplainFormat.JSON:
        document = _node_document(plan)
        return json.dumps(document, indent=2)
    lines: List[str] = []
    _append_text_lines(plan, 0, lines)
    return "\n".join(lines)


def _describe(node: LogicalPlanNode) -> str:
    if isinstance(node, Scan):
        return f"SCAN {node.relation.name}"
    if isinstance(node, Select):
        return f"SELECT [{node.predicate}]"
    if isinstance(node, Project):
        return f"PROJECT [{','.join(node.attribute_names())}]"
    if isinstance(node, Join):
        return f"JOIN [{node.predicate}]"
    if isinstance(node, Product):
        return "TIMES"
    raise ValueError(f"Unsupported plan node type: {type(node)}")


def _append_text_lines(
    node: LogicalPlanNode, depth: int, lines: List[str]
) -> None:
    stats = ""
    if node.output is not None:
        stats = f"  (T={node.output.tuple_count}; {node.output.render()})"
    lines.append(f"{'  ' * depth}{_describe(node)}{stats}")
    for child in node.children():
        _append_text_lines(child, depth + 1, lines)


def _node_document(node: LogicalPlanNode) -> Dict[str, Any]:
    document: Dict[str, Any] = {"operator": _describe(node)}
    if node.output is not None:
        document["tuple_count"] = node.output.tuple_count
        document["attributes"] = [
            {"name": attribute.name, "value_count": attribute.value_count}
            for attribute in node.output.attributes
        ]
    children = node.children()
    if children:
        document["inputs"] = [_node_document(child) for child in children]
    return document
