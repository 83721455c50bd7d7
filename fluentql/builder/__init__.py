"""Fluent SELECT builder with positional parameter binding."""

from typing import Optional

from fluentql.builder._base import CompiledQuery
from fluentql.builder._expressions import (
    Between,
    BetweenColumns,
    ColumnComparison,
    ColumnRef,
    ColumnSubqueryComparison,
    ColumnValueComparison,
    DateComparison,
    DateFunction,
    Exists,
    InList,
    InSubquery,
    NestedPredicates,
    NullCheck,
    Operator,
    Predicate,
    RawExpression,
    RawPredicate,
    ScalarComparison,
    SelectItem,
    SubquerySelect,
)
from fluentql.builder._grammar import Fragment, Grammar, compile_node
from fluentql.builder._select import QueryBuilder
from fluentql.config import GrammarConfig

__all__ = (
    "Between",
    "BetweenColumns",
    "ColumnComparison",
    "ColumnRef",
    "ColumnSubqueryComparison",
    "ColumnValueComparison",
    "CompiledQuery",
    "DateComparison",
    "DateFunction",
    "Exists",
    "Fragment",
    "Grammar",
    "InList",
    "InSubquery",
    "NestedPredicates",
    "NullCheck",
    "Operator",
    "Predicate",
    "QueryBuilder",
    "RawExpression",
    "RawPredicate",
    "ScalarComparison",
    "SelectItem",
    "SubquerySelect",
    "compile_node",
    "query",
    "table",
)


def query(config: Optional[GrammarConfig] = None) -> QueryBuilder:
    """Create an empty SELECT builder.

    Args:
        config: Optional grammar configuration, e.g. a different quote character.

    Returns:
        QueryBuilder: A new builder.
    """
    if config is None:
        return QueryBuilder()
    return QueryBuilder(config=config)


def table(name: str, config: Optional[GrammarConfig] = None) -> QueryBuilder:
    """Create a SELECT builder reading from ``name``.

    Args:
        name: The table to select from.
        config: Optional grammar configuration.

    Returns:
        QueryBuilder: A new builder with its table set.
    """
    return query(config).table(name)
