"""Render the expression model to parameterized SQL.

Each node compiles to a :class:`Fragment`: the SQL text and the values bound
to its ``?`` placeholders, in the order the placeholders appear. Composite
nodes compile their children first and concatenate both parts, so parameter
order always follows placeholder order.
"""

import re
from functools import singledispatch
from typing import TYPE_CHECKING, Any, NamedTuple, Optional

from fluentql.builder._expressions import (
    Between,
    BetweenColumns,
    ColumnComparison,
    ColumnRef,
    ColumnSubqueryComparison,
    ColumnValueComparison,
    DateComparison,
    Exists,
    InList,
    InSubquery,
    NestedPredicates,
    NullCheck,
    RawExpression,
    RawPredicate,
    ScalarComparison,
    SubquerySelect,
)
from fluentql.config import DEFAULT_GRAMMAR_CONFIG, GrammarConfig
from fluentql.exceptions import MissingTableError, SQLBuilderError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fluentql.builder._select import QueryBuilder

__all__ = ("Fragment", "Grammar", "compile_node")

PLACEHOLDER = "?"

_ALIAS_RE = re.compile(r"\s+as\s+", re.IGNORECASE)


class Fragment(NamedTuple):
    """A piece of compiled SQL and the values bound inside it."""

    sql: str
    parameters: tuple[Any, ...] = ()


def _join(fragments: "Iterable[Fragment]", separator: str) -> Fragment:
    sql: list[str] = []
    parameters: list[Any] = []
    for fragment in fragments:
        sql.append(fragment.sql)
        parameters.extend(fragment.parameters)
    return Fragment(separator.join(sql), tuple(parameters))


class Grammar:
    """Compiles a :class:`~fluentql.builder.QueryBuilder` into SQL text and parameters."""

    __slots__ = ("config",)

    def __init__(self, config: Optional[GrammarConfig] = None) -> None:
        self.config = config or DEFAULT_GRAMMAR_CONFIG

    def wrap_value(self, segment: str) -> str:
        """Quote a single identifier segment, doubling embedded quote characters."""
        if segment == "*":
            return segment
        quote = self.config.quote_char
        return f"{quote}{segment.replace(quote, quote * 2)}{quote}"

    def wrap(self, value: str) -> str:
        """Quote an identifier that may be dotted (``users.id``) or aliased (``id as user_id``).

        Args:
            value: The identifier.

        Returns:
            The quoted identifier.
        """
        if _ALIAS_RE.search(value):
            name, alias = _ALIAS_RE.split(value, maxsplit=1)
            return f"{self.wrap(name)} as {self.wrap_value(alias)}"
        return ".".join(self.wrap_value(segment) for segment in value.split("."))

    def wrap_table(self, table: str) -> str:
        return self.wrap(table)

    def compile_select(self, query: "QueryBuilder") -> Fragment:
        """Compile a full SELECT statement.

        Args:
            query: The builder to compile.

        Raises:
            MissingTableError: If no table was set on the builder.

        Returns:
            The compiled statement.
        """
        if not query.table_name:
            raise MissingTableError

        components = [self.compile_columns(query), Fragment(f"from {self.wrap_table(query.table_name)}")]
        wheres = self.compile_wheres(query)
        if wheres is not None:
            components.append(wheres)
        return _join(components, " ")

    def compile_columns(self, query: "QueryBuilder") -> Fragment:
        select = "select distinct " if query.is_distinct else "select "
        if not query.select_items:
            return Fragment(f"{select}*")
        columns = _join((compile_node(item, self) for item in query.select_items), ", ")
        return Fragment(select + columns.sql, columns.parameters)

    def compile_wheres(self, query: "QueryBuilder") -> Optional[Fragment]:
        """Compile the WHERE clause, or return ``None`` when there are no predicates."""
        predicates = self.compile_predicates(query)
        if predicates is None:
            return None
        return Fragment(f"where {predicates.sql}", predicates.parameters)

    def compile_predicates(self, query: "QueryBuilder") -> Optional[Fragment]:
        if not query.predicates:
            return None
        fragments = []
        for index, predicate in enumerate(query.predicates):
            fragment = compile_node(predicate, self)
            if index:
                fragment = Fragment(f"{predicate.boolean} {fragment.sql}", fragment.parameters)
            fragments.append(fragment)
        return _join(fragments, " ")

    def compile_subquery(self, query: "QueryBuilder") -> Fragment:
        """Compile a child builder wrapped in parentheses."""
        fragment = self.compile_select(query)
        return Fragment(f"({fragment.sql})", fragment.parameters)


@singledispatch
def compile_node(node: Any, grammar: Grammar) -> Fragment:
    """Compile a select item or predicate.

    Raises:
        SQLBuilderError: If the node type is unknown.
    """
    msg = f"Cannot compile expression of type {type(node).__name__}"
    raise SQLBuilderError(msg)


@compile_node.register(ColumnRef)
def _compile_column_ref(node: ColumnRef, grammar: Grammar) -> Fragment:
    return Fragment(grammar.wrap(node.name))


@compile_node.register(RawExpression)
def _compile_raw_expression(node: RawExpression, grammar: Grammar) -> Fragment:
    return Fragment(node.text, node.bindings)


@compile_node.register(SubquerySelect)
def _compile_subquery_select(node: SubquerySelect, grammar: Grammar) -> Fragment:
    sub = grammar.compile_subquery(node.query)
    return Fragment(f"{sub.sql} as {grammar.wrap_value(node.alias)}", sub.parameters)


@compile_node.register(ColumnComparison)
def _compile_column_comparison(node: ColumnComparison, grammar: Grammar) -> Fragment:
    return Fragment(f"{grammar.wrap(node.first)} {node.operator.value} {grammar.wrap(node.second)}")


@compile_node.register(ColumnValueComparison)
def _compile_column_value_comparison(node: ColumnValueComparison, grammar: Grammar) -> Fragment:
    return Fragment(f"{grammar.wrap(node.column)} {node.operator.value} {PLACEHOLDER}", (node.value,))


@compile_node.register(ScalarComparison)
def _compile_scalar_comparison(node: ScalarComparison, grammar: Grammar) -> Fragment:
    sub = grammar.compile_subquery(node.query)
    return Fragment(f"{sub.sql} {node.operator.value} {PLACEHOLDER}", (*sub.parameters, node.value))


@compile_node.register(ColumnSubqueryComparison)
def _compile_column_subquery_comparison(node: ColumnSubqueryComparison, grammar: Grammar) -> Fragment:
    sub = grammar.compile_subquery(node.query)
    return Fragment(f"{grammar.wrap(node.column)} {node.operator.value} {sub.sql}", sub.parameters)


@compile_node.register(DateComparison)
def _compile_date_comparison(node: DateComparison, grammar: Grammar) -> Fragment:
    return Fragment(
        f"{node.function.value}({grammar.wrap(node.column)}) {node.operator.value} {PLACEHOLDER}", (node.value,)
    )


@compile_node.register(NullCheck)
def _compile_null_check(node: NullCheck, grammar: Grammar) -> Fragment:
    suffix = "is not null" if node.negated else "is null"
    return Fragment(f"{grammar.wrap(node.column)} {suffix}")


@compile_node.register(InList)
def _compile_in_list(node: InList, grammar: Grammar) -> Fragment:
    if not node.values:
        return Fragment("1 = 1" if node.negated else "0 = 1")
    keyword = "not in" if node.negated else "in"
    placeholders = ", ".join(PLACEHOLDER for _ in node.values)
    return Fragment(f"{grammar.wrap(node.column)} {keyword} ({placeholders})", node.values)


@compile_node.register(InSubquery)
def _compile_in_subquery(node: InSubquery, grammar: Grammar) -> Fragment:
    keyword = "not in" if node.negated else "in"
    sub = grammar.compile_subquery(node.query)
    return Fragment(f"{grammar.wrap(node.column)} {keyword} {sub.sql}", sub.parameters)


@compile_node.register(Between)
def _compile_between(node: Between, grammar: Grammar) -> Fragment:
    keyword = "not between" if node.negated else "between"
    return Fragment(
        f"{grammar.wrap(node.column)} {keyword} {PLACEHOLDER} and {PLACEHOLDER}", (node.low, node.high)
    )


@compile_node.register(BetweenColumns)
def _compile_between_columns(node: BetweenColumns, grammar: Grammar) -> Fragment:
    keyword = "not between" if node.negated else "between"
    return Fragment(f"{grammar.wrap(node.column)} {keyword} {grammar.wrap(node.low)} and {grammar.wrap(node.high)}")


@compile_node.register(Exists)
def _compile_exists(node: Exists, grammar: Grammar) -> Fragment:
    sub = grammar.compile_subquery(node.query)
    keyword = "not exists" if node.negated else "exists"
    return Fragment(f"{keyword} {sub.sql}", sub.parameters)


@compile_node.register(NestedPredicates)
def _compile_nested(node: NestedPredicates, grammar: Grammar) -> Fragment:
    inner = grammar.compile_predicates(node.query)
    if inner is None:
        return Fragment("1 = 1")
    prefix = "not " if node.negated else ""
    return Fragment(f"{prefix}({inner.sql})", inner.parameters)


@compile_node.register(RawPredicate)
def _compile_raw_predicate(node: RawPredicate, grammar: Grammar) -> Fragment:
    return Fragment(node.sql, node.bindings)
