"""Canonical query parser using sqlglot."""

import re
from typing import List, Tuple

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from ..catalogue.catalogue import Catalogue
from ..plan.logical import LogicalPlanNode, Product, Project, Scan, Select
from ..plan.predicates import AttrEqAttr, AttrEqValue, Predicate
from ..plan.relation import Attribute

_WHERE_PATTERN = re.compile(r"\bWHERE\b(?P<body>.*)$", re.IGNORECASE | re.DOTALL)
_AND_PATTERN = re.compile(r"\bAND\b", re.IGNORECASE)
# Commas outside single- or double-quoted literals
_PREDICATE_SEPARATOR = re.compile(r""",(?=(?:[^"']*["'][^"']*["'])*[^"']*$)""")


class QueryParser:
    """Builds canonical plans from queries.

    The canonical query form is::

        SELECT <attr>,<attr>,...
        FROM <relation>,<relation>,...
        WHERE <attr>="<value>",<attr>=<attr>,...

    The WHERE line is optional and ``SELECT *`` skips the projection.
    Plain SQL with ``AND`` between predicates, single-quoted literals and
    inner ``JOIN ... ON`` clauses is accepted too.

    The canonical plan is a left-deep tree of cartesian products over
    scans, followed by one selection per predicate in query order, topped
    by a single projection.
    """

    def __init__(self, catalogue: Catalogue):
        """Initialize parser.

        Args:
            catalogue: Catalogue used to resolve relation and attribute names
        """
        self.catalogue = catalogue
        # Double-quoted text is a string literal in MySQL
        self.dialect = "mysql"

    def parse(self, text: str) -> LogicalPlanNode:
        """Parse a query into a canonical plan.

        Args:
            text: Canonical query or SQL text

        Returns:
            Root of the canonical plan

        Raises:
            ValueError: If the query uses unsupported syntax
            CatalogueError: If a relation or attribute is unknown
        """
        ast = self.parse_ast(text)
        if not isinstance(ast, exp.Select):
            raise ValueError(f"Unsupported statement type: {type(ast).__name__}")
        return self._convert_select(ast)

    def parse_ast(self, text: str) -> exp.Expression:
        """Parse query text to a sqlglot AST."""
        sql = self._normalise(text)
        try:
            return sqlglot.parse_one(sql, dialect=self.dialect)
        except SqlglotError as e:
            raise ValueError(f"Failed to parse query: {e}") from e

    def _normalise(self, text: str) -> str:
        """Rewrite the comma-separated WHERE list of a canonical query as SQL."""
        sql = " ".join(line.strip() for line in text.strip().splitlines())
        if not sql:
            raise ValueError("Query is empty")
        match = _WHERE_PATTERN.search(sql)
        if match is None:
            return sql
        body = match.group("body")
        if _AND_PATTERN.search(body):
            return sql
        predicates = _PREDICATE_SEPARATOR.split(body)
        joined = " AND ".join(predicate.strip() for predicate in predicates)
        return f"{sql[:match.start('body')]} {joined}"

    def _convert_select(self, select: exp.Select) -> LogicalPlanNode:
        plan, join_predicates = self._build_from_clause(select)
        for predicate in join_predicates + self._where_predicates(select):
            plan = Select(plan, predicate)
        return self._build_select_clause(select, plan)

    def _build_from_clause(
        self, select: exp.Select
    ) -> Tuple[LogicalPlanNode, List[Predicate]]:
        """Build the product chain and collect predicates of JOIN ... ON."""
        from_clause = select.find(exp.From)
        if from_clause is None:
            raise ValueError("SELECT must have FROM clause")

        plan: LogicalPlanNode = self._build_scan(from_clause.this)
        predicates: List[Predicate] = []
        for join_clause in select.args.get("joins") or []:
            if join_clause.side or join_clause.kind not in ("", "INNER", "CROSS"):
                raise ValueError(f"Unsupported join: {join_clause.sql()}")
            if join_clause.args.get("using"):
                raise ValueError("JOIN ... USING is not supported")
            plan = Product(plan, self._build_scan(join_clause.this))
            condition = join_clause.args.get("on")
            if condition is not None:
                predicates.extend(self._convert_condition(condition))
        return plan, predicates

    def _build_scan(self, table_expr: exp.Expression) -> Scan:
        if not isinstance(table_expr, exp.Table):
            raise ValueError(f"Unsupported FROM item: {table_expr.sql()}")
        if table_expr.alias:
            raise ValueError(f"Relation aliases are not supported: {table_expr.sql()}")
        return Scan(self.catalogue.get_relation(table_expr.name))

    def _where_predicates(self, select: exp.Select) -> List[Predicate]:
        where = select.args.get("where")
        if not where:
            return []
        return self._convert_condition(where.this)

    def _convert_condition(self, condition: exp.Expression) -> List[Predicate]:
        """Split a conjunction into equality predicates, left to right."""
        predicates: List[Predicate] = []
        stack = [condition]
        while stack:
            expr = stack.pop()
            if isinstance(expr, exp.Paren):
                stack.append(expr.this)
            elif isinstance(expr, exp.And):
                stack.append(expr.right)
                stack.append(expr.left)
            else:
                predicates.append(self._convert_predicate(expr))
        return predicates

    def _convert_predicate(self, expr: exp.Expression) -> Predicate:
        if not isinstance(expr, exp.EQ):
            raise ValueError(f"Only equality predicates are supported: {expr.sql()}")
        left, right = expr.left, expr.right
        if isinstance(left, exp.Literal) and isinstance(right, exp.Column):
            left, right = right, left
        if not isinstance(left, exp.Column):
            raise ValueError(f"Unsupported predicate: {expr.sql()}")

        attribute = self._resolve_attribute(left)
        if isinstance(right, exp.Column):
            return AttrEqAttr(attribute, self._resolve_attribute(right))
        if isinstance(right, exp.Literal):
            return AttrEqValue(attribute, right.this)
        raise ValueError(f"Unsupported predicate: {expr.sql()}")

    def _build_select_clause(
        self, select: exp.Select, input_plan: LogicalPlanNode
    ) -> LogicalPlanNode:
        """Top the plan with a projection unless the query selects ``*``."""
        expressions = select.expressions
        if len(expressions) == 1 and isinstance(expressions[0], exp.Star):
            return input_plan
        if select.args.get("distinct"):
            raise ValueError("SELECT DISTINCT is not supported")

        attributes: List[Attribute] = []
        for select_expr in expressions:
            if not isinstance(select_expr, exp.Column) or isinstance(
                select_expr.this, exp.Star
            ):
                raise ValueError(f"Unsupported SELECT item: {select_expr.sql()}")
            attributes.append(self._resolve_attribute(select_expr))
        return Project(input_plan, attributes)

    def _resolve_attribute(self, column: exp.Column) -> Attribute:
        return self.catalogue.get_attribute(column.name)

    def __repr__(self) -> str:
        return f"QueryParser(dialect={self.dialect})"

