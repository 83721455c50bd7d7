"""Fluent builder for SELECT statements.

Every public method mutates the builder and returns it so calls can be
chained. Nothing is rendered until :meth:`QueryBuilder.to_sql`,
:meth:`QueryBuilder.to_params` or :meth:`QueryBuilder.build` is called, and
rendering never changes builder state.
"""

import copy
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional, Union

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
from fluentql.builder._grammar import Fragment, Grammar
from fluentql.config import DEFAULT_GRAMMAR_CONFIG, GrammarConfig
from fluentql.exceptions import SQLBuilderError
from fluentql.typing import BindValue, Boolean, ConfigureCallback, Empty, EmptyType, SubqueryInput, WhereEntries
from fluentql.utils.logging import get_logger, log_with_context
from fluentql.utils.type_guards import is_configure_callback, is_query_builder

__all__ = ("QueryBuilder",)

logger = get_logger("builder")


@dataclass
class QueryBuilder:
    """Builder for SELECT statements."""

    config: GrammarConfig = DEFAULT_GRAMMAR_CONFIG
    table_name: Optional[str] = field(default=None, init=False)
    select_items: list[SelectItem] = field(default_factory=list, init=False)
    predicates: list[Predicate] = field(default_factory=list, init=False)
    is_distinct: bool = field(default=False, init=False)

    @property
    def grammar(self) -> Grammar:
        return Grammar(self.config)

    def new_query(self) -> "QueryBuilder":
        """Create an empty builder that shares this builder's configuration.

        Returns:
            QueryBuilder: A new builder.
        """
        return QueryBuilder(config=self.config)

    def clone(self) -> "QueryBuilder":
        """Return an independent copy of this builder, including any sub-queries."""
        return copy.deepcopy(self)

    # -- FROM --
    def table(self, name: str) -> "QueryBuilder":
        """Set the FROM target. Calling it again replaces the previous table.

        Args:
            name: The table name, optionally schema qualified.

        Raises:
            SQLBuilderError: If the name is empty.

        Returns:
            QueryBuilder: The current builder instance for method chaining.
        """
        if not isinstance(name, str) or not name.strip():
            msg = "Table name must be a non-empty string."
            raise SQLBuilderError(msg)
        self.table_name = name
        return self

    def from_(self, name: str) -> "QueryBuilder":
        """Alias of :meth:`table` that reads naturally inside sub-query callbacks."""
        return self.table(name)

    # -- SELECT --
    def select(self, *columns: str) -> "QueryBuilder":
        """Add columns to the select list.

        Returns:
            QueryBuilder: The current builder instance for method chaining.
        """
        self.select_items.extend(ColumnRef(column) for column in columns)
        return self

    def select_raw(self, expression: str, bindings: Iterable[BindValue] = ()) -> "QueryBuilder":
        """Add a raw SQL fragment to the select list.

        The fragment is emitted verbatim. Any ``?`` placeholders it contains are
        bound to ``bindings`` in order.

        Args:
            expression: Trusted SQL text, e.g. ``count(*)``.
            bindings: Values for placeholders inside ``expression``.

        Returns:
            QueryBuilder: The current builder instance for method chaining.
        """
        self.select_items.append(RawExpression(expression, tuple(bindings)))
        return self

    def select_sub(self, query: SubqueryInput, alias: str) -> "QueryBuilder":
        """Add a sub-query to the select list as ``(<query>) as alias``.

        Args:
            query: A builder, or a callback that configures a fresh child builder.
            alias: Name of the resulting column.

        Returns:
            QueryBuilder: The current builder instance for method chaining.
        """
        self.select_items.append(SubquerySelect(self._create_sub(query), alias))
        return self

    def distinct(self, flag: bool = True) -> "QueryBuilder":
        self.is_distinct = flag
        return self

    # -- WHERE --
    def where(
        self,
        column: Union[str, "QueryBuilder", ConfigureCallback, WhereEntries],
        operator: Any = Empty,
        value: Union[BindValue, SubqueryInput, EmptyType] = Empty,
        boolean: Boolean = "and",
    ) -> "QueryBuilder":
        """Add a WHERE predicate.

        The form of the predicate depends on the arguments:

        - ``where(callback, op, value)`` / ``where(builder, op, value)``:
          ``(<sub-query>) op ?``
        - ``where(callback)``: a parenthesised group of the predicates the
          callback adds to a child builder
        - ``where(column, op, value)``: ``column op ?``
        - ``where(column, value)``: shorthand for ``where(column, "=", value)``
        - ``where(column, "=", None)`` / ``where(column, "<>", None)``:
          ``column is [not] null``
        - ``where(column, op, callback)``: ``column op (<sub-query>)``
        - ``where({"a": 1, "b": 2})`` / ``where([("a", 1), ("b", ">", 2)])``:
          a parenthesised group with one predicate per entry

        Raises:
            InvalidOperatorError: If the operator is not in the allow-list.
            SQLBuilderError: If the arguments do not match any form.

        Returns:
            QueryBuilder: The current builder instance for method chaining.
        """
        if isinstance(column, (Mapping, list, tuple)):
            return self._add_array_of_wheres(column, boolean, "where")
        if is_configure_callback(column) or is_query_builder(column):
            if operator is Empty:
                return self._add_nested_where(self._create_nested(column), boolean)
            if value is Empty:
                msg = "A sub-query comparison requires a bound value."
                raise SQLBuilderError(msg)
            return self.where_subquery(column, operator, value, boolean)  # type: ignore[arg-type]

        if not isinstance(column, str):
            msg = f"Unsupported where() column argument: {type(column).__name__}"
            raise SQLBuilderError(msg)
        if operator is Empty:
            msg = "where() requires an operator or a value."
            raise SQLBuilderError(msg)

        if value is Empty:
            if Operator.is_operator(operator):
                value = None
            else:
                operator, value = Operator.EQ, operator

        if is_configure_callback(value) or is_query_builder(value):
            operator = Operator.coerce(operator)
            self.predicates.append(ColumnSubqueryComparison(column, operator, self._create_sub(value), boolean))
            return self

        if value is None:
            return self._where_null_comparison(column, Operator.coerce(operator), boolean)

        self.predicates.append(ColumnValueComparison(column, operator, value, boolean))  # type: ignore[arg-type]
        return self

    def or_where(
        self,
        column: Union[str, "QueryBuilder", ConfigureCallback, WhereEntries],
        operator: Any = Empty,
        value: Union[BindValue, SubqueryInput, EmptyType] = Empty,
    ) -> "QueryBuilder":
        return self.where(column, operator, value, "or")

    def where_not(
        self,
        column: Union[str, "QueryBuilder", ConfigureCallback, WhereEntries],
        operator: Any = Empty,
        value: Union[BindValue, SubqueryInput, EmptyType] = Empty,
        boolean: Boolean = "and",
    ) -> "QueryBuilder":
        """Add a negated group: ``not (<predicate>)``.

        Accepts every argument form of :meth:`where`. A callback given without
        an operator negates the group of predicates it adds.

        Returns:
            QueryBuilder: The current builder instance for method chaining.
        """
        self._check_not_self(column)
        if isinstance(column, (Mapping, list, tuple)):
            return self._add_array_of_wheres(column, boolean, "where", negated=True)
        if operator is Empty and (is_configure_callback(column) or is_query_builder(column)):
            nested = self._create_nested(column)
        else:
            nested = self._create_nested(lambda query: query.where(column, operator, value))
        return self._add_nested_where(nested, boolean, negated=True)

    def or_where_not(
        self,
        column: Union[str, "QueryBuilder", ConfigureCallback, WhereEntries],
        operator: Any = Empty,
        value: Union[BindValue, SubqueryInput, EmptyType] = Empty,
    ) -> "QueryBuilder":
        return self.where_not(column, operator, value, "or")

    def where_subquery(
        self, query: SubqueryInput, operator: Any, value: BindValue, boolean: Boolean = "and"
    ) -> "QueryBuilder":
        """Compare a single-value sub-query to a bound value: ``(<query>) op ?``.

        The operator is validated before a callback is invoked, so a rejected
        operator never runs caller code.

        Args:
            query: A configured builder, or a callback that configures a fresh child builder.
            operator: Comparison operator.
            value: Value bound to the placeholder.
            boolean: Connector to the previous predicate.

        Returns:
            QueryBuilder: The current builder instance for method chaining.
        """
        operator = Operator.coerce(operator)
        self.predicates.append(ScalarComparison(self._create_sub(query), operator, value, boolean))
        return self

    def where_column(
        self,
        first: Union[str, WhereEntries],
        operator: Any = Empty,
        second: Union[str, EmptyType] = Empty,
        boolean: Boolean = "and",
    ) -> "QueryBuilder":
        """Compare two columns: ``first op second``.

        ``where_column(first, second)`` implies ``=``. A mapping of
        ``{first: second}`` pairs or a list of argument tuples adds a
        parenthesised group of column comparisons.

        Raises:
            InvalidOperatorError: If the operator is not in the allow-list.
            SQLBuilderError: If the second column is missing.

        Returns:
            QueryBuilder: The current builder instance for method chaining.
        """
        if isinstance(first, (Mapping, list, tuple)):
            return self._add_array_of_wheres(first, boolean, "where_column")
        if second is Empty:
            if operator is Empty or Operator.is_operator(operator):
                msg = "where_column() requires a second column."
                raise SQLBuilderError(msg)
            operator, second = Operator.EQ, operator
        self.predicates.append(ColumnComparison(first, operator, second, boolean))  # type: ignore[arg-type]
        return self

    def or_where_column(
        self, first: Union[str, WhereEntries], operator: Any = Empty, second: Union[str, EmptyType] = Empty
    ) -> "QueryBuilder":
        return self.where_column(first, operator, second, "or")

    def where_null(
        self, columns: Union[str, Iterable[str]], boolean: Boolean = "and", negated: bool = False
    ) -> "QueryBuilder":
        """Add ``column is null`` for one or more columns.

        Returns:
            QueryBuilder: The current builder instance for method chaining.
        """
        names = [columns] if isinstance(columns, str) else list(columns)
        self.predicates.extend(NullCheck(name, negated, boolean) for name in names)
        return self

    def where_not_null(self, columns: Union[str, Iterable[str]], boolean: Boolean = "and") -> "QueryBuilder":
        return self.where_null(columns, boolean, negated=True)

    def or_where_null(self, columns: Union[str, Iterable[str]]) -> "QueryBuilder":
        return self.where_null(columns, "or")

    def or_where_not_null(self, columns: Union[str, Iterable[str]]) -> "QueryBuilder":
        return self.where_not_null(columns, "or")

    def where_in(
        self,
        column: str,
        values: Union[Iterable[BindValue], SubqueryInput],
        boolean: Boolean = "and",
        negated: bool = False,
    ) -> "QueryBuilder":
        """Add ``column in (...)`` for a list of values or a sub-query.

        An empty list compiles to ``0 = 1`` (``1 = 1`` when negated).

        Raises:
            SQLBuilderError: If ``values`` is a string or not iterable.

        Returns:
            QueryBuilder: The current builder instance for method chaining.
        """
        if is_configure_callback(values) or is_query_builder(values):
            self.predicates.append(InSubquery(column, self._create_sub(values), negated, boolean))
            return self
        if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
            msg = "where_in() expects an iterable of values or a sub-query."
            raise SQLBuilderError(msg)
        self.predicates.append(InList(column, tuple(values), negated, boolean))
        return self

    def where_not_in(
        self, column: str, values: Union[Iterable[BindValue], SubqueryInput], boolean: Boolean = "and"
    ) -> "QueryBuilder":
        return self.where_in(column, values, boolean, negated=True)

    def or_where_in(self, column: str, values: Union[Iterable[BindValue], SubqueryInput]) -> "QueryBuilder":
        return self.where_in(column, values, "or")

    def or_where_not_in(self, column: str, values: Union[Iterable[BindValue], SubqueryInput]) -> "QueryBuilder":
        return self.where_not_in(column, values, "or")

    def where_between(
        self, column: str, values: Iterable[BindValue], boolean: Boolean = "and", negated: bool = False
    ) -> "QueryBuilder":
        """Add ``column between ? and ?``.

        Raises:
            SQLBuilderError: If ``values`` does not hold exactly two items.

        Returns:
            QueryBuilder: The current builder instance for method chaining.
        """
        bounds = list(values)
        if len(bounds) != 2:  # noqa: PLR2004
            msg = f"where_between() expects exactly two values, got {len(bounds)}."
            raise SQLBuilderError(msg)
        self.predicates.append(Between(column, bounds[0], bounds[1], negated, boolean))
        return self

    def where_not_between(self, column: str, values: Iterable[BindValue], boolean: Boolean = "and") -> "QueryBuilder":
        return self.where_between(column, values, boolean, negated=True)

    def or_where_between(self, column: str, values: Iterable[BindValue]) -> "QueryBuilder":
        return self.where_between(column, values, "or")

    def or_where_not_between(self, column: str, values: Iterable[BindValue]) -> "QueryBuilder":
        return self.where_not_between(column, values, "or")

    def where_between_columns(
        self, column: str, columns: Iterable[str], boolean: Boolean = "and", negated: bool = False
    ) -> "QueryBuilder":
        """Add ``column between low and high`` where both bounds are columns.

        Raises:
            SQLBuilderError: If ``columns`` does not hold exactly two names.

        Returns:
            QueryBuilder: The current builder instance for method chaining.
        """
        bounds = [columns] if isinstance(columns, str) else list(columns)
        if len(bounds) != 2:  # noqa: PLR2004
            msg = f"where_between_columns() expects exactly two columns, got {len(bounds)}."
            raise SQLBuilderError(msg)
        self.predicates.append(BetweenColumns(column, bounds[0], bounds[1], negated, boolean))
        return self

    def where_not_between_columns(
        self, column: str, columns: Iterable[str], boolean: Boolean = "and"
    ) -> "QueryBuilder":
        return self.where_between_columns(column, columns, boolean, negated=True)

    def or_where_between_columns(self, column: str, columns: Iterable[str]) -> "QueryBuilder":
        return self.where_between_columns(column, columns, "or")

    def or_where_not_between_columns(self, column: str, columns: Iterable[str]) -> "QueryBuilder":
        return self.where_not_between_columns(column, columns, "or")

    def where_date(
        self, column: str, operator: Any, value: Union[BindValue, EmptyType] = Empty, boolean: Boolean = "and"
    ) -> "QueryBuilder":
        """Compare ``date(column)`` to a value. ``where_date(column, value)`` implies ``=``."""
        return self._add_date_based_where(DateFunction.DATE, column, operator, value, boolean)

    def or_where_date(self, column: str, operator: Any, value: Union[BindValue, EmptyType] = Empty) -> "QueryBuilder":
        return self.where_date(column, operator, value, "or")

    def where_time(
        self, column: str, operator: Any, value: Union[BindValue, EmptyType] = Empty, boolean: Boolean = "and"
    ) -> "QueryBuilder":
        return self._add_date_based_where(DateFunction.TIME, column, operator, value, boolean)

    def or_where_time(self, column: str, operator: Any, value: Union[BindValue, EmptyType] = Empty) -> "QueryBuilder":
        return self.where_time(column, operator, value, "or")

    def where_day(
        self, column: str, operator: Any, value: Union[BindValue, EmptyType] = Empty, boolean: Boolean = "and"
    ) -> "QueryBuilder":
        """Compare ``day(column)`` to a value, zero padded to two digits."""
        return self._add_date_based_where(DateFunction.DAY, column, operator, value, boolean)

    def or_where_day(self, column: str, operator: Any, value: Union[BindValue, EmptyType] = Empty) -> "QueryBuilder":
        return self.where_day(column, operator, value, "or")

    def where_month(
        self, column: str, operator: Any, value: Union[BindValue, EmptyType] = Empty, boolean: Boolean = "and"
    ) -> "QueryBuilder":
        """Compare ``month(column)`` to a value, zero padded to two digits."""
        return self._add_date_based_where(DateFunction.MONTH, column, operator, value, boolean)

    def or_where_month(self, column: str, operator: Any, value: Union[BindValue, EmptyType] = Empty) -> "QueryBuilder":
        return self.where_month(column, operator, value, "or")

    def where_year(
        self, column: str, operator: Any, value: Union[BindValue, EmptyType] = Empty, boolean: Boolean = "and"
    ) -> "QueryBuilder":
        return self._add_date_based_where(DateFunction.YEAR, column, operator, value, boolean)

    def or_where_year(self, column: str, operator: Any, value: Union[BindValue, EmptyType] = Empty) -> "QueryBuilder":
        return self.where_year(column, operator, value, "or")

    def where_exists(self, query: SubqueryInput, boolean: Boolean = "and", negated: bool = False) -> "QueryBuilder":
        """Add ``exists (<query>)``.

        Returns:
            QueryBuilder: The current builder instance for method chaining.
        """
        self.predicates.append(Exists(self._create_sub(query), negated, boolean))
        return self

    def where_not_exists(self, query: SubqueryInput, boolean: Boolean = "and") -> "QueryBuilder":
        return self.where_exists(query, boolean, negated=True)

    def or_where_exists(self, query: SubqueryInput) -> "QueryBuilder":
        return self.where_exists(query, "or")

    def or_where_not_exists(self, query: SubqueryInput) -> "QueryBuilder":
        return self.where_not_exists(query, "or")

    def where_nested(self, callback: ConfigureCallback, boolean: Boolean = "and") -> "QueryBuilder":
        """Group the predicates added by ``callback`` in parentheses.

        A callback that adds no predicates leaves the builder unchanged.

        Returns:
            QueryBuilder: The current builder instance for method chaining.
        """
        return self._add_nested_where(self._create_nested(callback), boolean)

    def where_raw(self, sql: str, bindings: Iterable[BindValue] = (), boolean: Boolean = "and") -> "QueryBuilder":
        """Add a trusted raw predicate. ``?`` placeholders inside it bind to ``bindings``."""
        self.predicates.append(RawPredicate(sql, tuple(bindings), boolean))
        return self

    def or_where_raw(self, sql: str, bindings: Iterable[BindValue] = ()) -> "QueryBuilder":
        return self.where_raw(sql, bindings, "or")

    # -- Compilation --
    def to_sql(self) -> str:
        """Compile the statement text.

        Raises:
            MissingTableError: If no table was set.

        Returns:
            str: SQL with ``?`` placeholders.
        """
        return self._compile().sql

    def to_params(self) -> list[Any]:
        """Compile the bound values in placeholder order.

        Raises:
            MissingTableError: If no table was set.

        Returns:
            list: One value per ``?`` in :meth:`to_sql`.
        """
        return list(self._compile().parameters)

    def build(self) -> CompiledQuery:
        """Compile the statement text and its parameters together.

        Raises:
            MissingTableError: If no table was set.

        Returns:
            CompiledQuery: The compiled statement.
        """
        fragment = self._compile()
        log_with_context(
            logger,
            logging.DEBUG,
            "Compiled SELECT statement",
            sql=fragment.sql,
            parameter_count=len(fragment.parameters),
        )
        return CompiledQuery(sql=fragment.sql, parameters=fragment.parameters, dialect=self.config.dialect)

    def __str__(self) -> str:
        """Return the compiled statement text.

        Raises:
            MissingTableError: If no table was set.
        """
        return self.to_sql()

    # -- Internals --
    def _compile(self) -> Fragment:
        return self.grammar.compile_select(self)

    def _create_sub(self, query: Any) -> "QueryBuilder":
        self._check_not_self(query)
        if is_query_builder(query):
            return query
        if is_configure_callback(query):
            child = self.new_query()
            query(child)
            return child
        msg = "A sub-query must be a query builder instance or a callable."
        raise SQLBuilderError(msg)

    def _create_nested(self, query: Any) -> "QueryBuilder":
        self._check_not_self(query)
        if is_query_builder(query):
            return query
        child = self.new_query()
        if self.table_name:
            child.table(self.table_name)
        query(child)
        return child

    def _check_not_self(self, query: Any) -> None:
        if query is self:
            msg = "A query cannot be used as its own sub-query."
            raise SQLBuilderError(msg)

    @staticmethod
    def _normalize_where_entries(wheres: Any) -> list[tuple[Any, Any, Any, Boolean]]:
        """Expand the mapping and list forms of ``where`` into ``(column, op, value, boolean)`` tuples.

        A mapping pairs each column with its value under ``=``. A list holds
        ``(column, value)``, ``(column, op, value)`` or ``(column, op, value, boolean)`` entries.

        Raises:
            SQLBuilderError: If an entry has an unsupported shape.
        """
        if isinstance(wheres, Mapping):
            return [(column, Operator.EQ, value, "and") for column, value in wheres.items()]
        entries: list[tuple[Any, Any, Any, Boolean]] = []
        for entry in wheres:
            if isinstance(entry, str) or not isinstance(entry, Sequence):
                msg = f"Invalid where entry: {entry!r}"
                raise SQLBuilderError(msg)
            if len(entry) == 2:  # noqa: PLR2004
                entries.append((entry[0], Operator.EQ, entry[1], "and"))
            elif len(entry) == 3:  # noqa: PLR2004
                entries.append((entry[0], entry[1], entry[2], "and"))
            elif len(entry) == 4:  # noqa: PLR2004
                entries.append((entry[0], entry[1], entry[2], entry[3]))
            else:
                msg = f"Invalid where parameters count {len(entry)}."
                raise SQLBuilderError(msg)
        return entries

    def _add_array_of_wheres(self, wheres: Any, boolean: Boolean, method: str, negated: bool = False) -> "QueryBuilder":
        entries = self._normalize_where_entries(wheres)

        def configure(query: "QueryBuilder") -> None:
            add = getattr(query, method)
            for column, operator, value, entry_boolean in entries:
                add(column, operator, value, entry_boolean)

        return self._add_nested_where(self._create_nested(configure), boolean, negated)

    def _add_nested_where(self, query: "QueryBuilder", boolean: Boolean, negated: bool = False) -> "QueryBuilder":
        if query.predicates:
            self.predicates.append(NestedPredicates(query, negated=negated, boolean=boolean))
        return self

    def _where_null_comparison(self, column: str, operator: Operator, boolean: Boolean) -> "QueryBuilder":
        if operator is Operator.EQ:
            return self.where_null(column, boolean)
        if operator in {Operator.NE, Operator.NE_ALT}:
            return self.where_not_null(column, boolean)
        msg = f"Operator {operator.value!r} cannot be compared with null."
        raise SQLBuilderError(msg)

    def _add_date_based_where(
        self,
        function: DateFunction,
        column: str,
        operator: Any,
        value: Union[BindValue, EmptyType],
        boolean: Boolean,
    ) -> "QueryBuilder":
        if value is Empty:
            if Operator.is_operator(operator):
                msg = f"{function.value}() comparison with {str(operator).strip()!r} requires a value."
                raise SQLBuilderError(msg)
            operator, value = Operator.EQ, operator
        if function in {DateFunction.DAY, DateFunction.MONTH} and value is not None:
            value = str(value).rjust(2, "0")
        self.predicates.append(DateComparison(function, column, operator, value, boolean))  # type: ignore[arg-type]
        return self
