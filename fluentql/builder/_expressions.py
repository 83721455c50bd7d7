"""Expression model for SELECT statements.

Select items and predicates are plain frozen dataclasses. They hold data only;
turning them into SQL text is the job of :mod:`fluentql.builder._grammar`.
Comparison nodes validate their operator on construction so an invalid
operator can never reach the renderer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

from fluentql.exceptions import InvalidOperatorError, SQLBuilderError
from fluentql.utils.type_guards import is_bind_value

if TYPE_CHECKING:
    from fluentql.builder._select import QueryBuilder
    from fluentql.typing import BindValue, Boolean

__all__ = (
    "Between",
    "BetweenColumns",
    "ColumnComparison",
    "ColumnRef",
    "ColumnSubqueryComparison",
    "ColumnValueComparison",
    "DateComparison",
    "DateFunction",
    "Exists",
    "InList",
    "InSubquery",
    "NestedPredicates",
    "NullCheck",
    "Operator",
    "Predicate",
    "RawExpression",
    "RawPredicate",
    "ScalarComparison",
    "SelectItem",
    "SubquerySelect",
)


class Operator(str, Enum):
    """Comparison operators accepted by the builder."""

    EQ = "="
    LT = "<"
    GT = ">"
    LTE = "<="
    GTE = ">="
    NE = "<>"
    NE_ALT = "!="

    def __str__(self) -> str:
        return self.value

    @classmethod
    def coerce(cls, operator: Any) -> "Operator":
        """Resolve ``operator`` to a member of the allow-list.

        Args:
            operator: An :class:`Operator` or its SQL spelling.

        Raises:
            InvalidOperatorError: If the operator is not allowed.

        Returns:
            The matching operator.
        """
        if isinstance(operator, cls):
            return operator
        if isinstance(operator, str):
            try:
                return cls(operator.strip())
            except ValueError:
                pass
        raise InvalidOperatorError(operator)

    @classmethod
    def is_operator(cls, value: Any) -> bool:
        return isinstance(value, cls) or (isinstance(value, str) and value.strip() in _OPERATOR_VALUES)


_OPERATOR_VALUES = frozenset(member.value for member in Operator)


class DateFunction(str, Enum):
    """SQL functions used to extract part of a temporal column."""

    DATE = "date"
    TIME = "time"
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


def _check_bind_value(value: Any) -> None:
    if not is_bind_value(value):
        msg = f"Unsupported bind value type: {type(value).__name__}"
        raise SQLBuilderError(msg)


# -- Select items --
@dataclass(frozen=True)
class ColumnRef:
    """A column rendered as a quoted identifier."""

    name: str

    def __post_init__(self) -> None:
        if not self.name:
            msg = "Column name must not be empty."
            raise SQLBuilderError(msg)


@dataclass(frozen=True)
class RawExpression:
    """A trusted SQL fragment rendered verbatim."""

    text: str
    bindings: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        for value in self.bindings:
            _check_bind_value(value)


@dataclass(frozen=True)
class SubquerySelect:
    """A sub-query in the select list, rendered as ``(<query>) as alias``."""

    query: "QueryBuilder"
    alias: str


SelectItem = Union[ColumnRef, RawExpression, SubquerySelect]


# -- Predicates --
@dataclass(frozen=True)
class ColumnComparison:
    """Two columns compared directly, typically to correlate a sub-query."""

    first: str
    operator: Operator
    second: str
    boolean: "Boolean" = "and"

    def __post_init__(self) -> None:
        object.__setattr__(self, "operator", Operator.coerce(self.operator))


@dataclass(frozen=True)
class ColumnValueComparison:
    """A column compared to a bound value."""

    column: str
    operator: Operator
    value: "BindValue"
    boolean: "Boolean" = "and"

    def __post_init__(self) -> None:
        object.__setattr__(self, "operator", Operator.coerce(self.operator))
        _check_bind_value(self.value)


@dataclass(frozen=True)
class ScalarComparison:
    """A single-value sub-query compared to a bound value."""

    query: "QueryBuilder"
    operator: Operator
    value: "BindValue"
    boolean: "Boolean" = "and"

    def __post_init__(self) -> None:
        object.__setattr__(self, "operator", Operator.coerce(self.operator))
        _check_bind_value(self.value)


@dataclass(frozen=True)
class ColumnSubqueryComparison:
    """A column compared to a single-value sub-query."""

    column: str
    operator: Operator
    query: "QueryBuilder"
    boolean: "Boolean" = "and"

    def __post_init__(self) -> None:
        object.__setattr__(self, "operator", Operator.coerce(self.operator))


@dataclass(frozen=True)
class DateComparison:
    """A date/time part of a column compared to a bound value."""

    function: DateFunction
    column: str
    operator: Operator
    value: "BindValue"
    boolean: "Boolean" = "and"

    def __post_init__(self) -> None:
        object.__setattr__(self, "function", DateFunction(self.function))
        object.__setattr__(self, "operator", Operator.coerce(self.operator))
        _check_bind_value(self.value)


@dataclass(frozen=True)
class NullCheck:
    column: str
    negated: bool = False
    boolean: "Boolean" = "and"


@dataclass(frozen=True)
class InList:
    """Membership in a literal list. An empty list is always false (or true when negated)."""

    column: str
    values: tuple[Any, ...] = field(default_factory=tuple)
    negated: bool = False
    boolean: "Boolean" = "and"

    def __post_init__(self) -> None:
        for value in self.values:
            _check_bind_value(value)


@dataclass(frozen=True)
class InSubquery:
    column: str
    query: "QueryBuilder"
    negated: bool = False
    boolean: "Boolean" = "and"


@dataclass(frozen=True)
class Between:
    column: str
    low: "BindValue"
    high: "BindValue"
    negated: bool = False
    boolean: "Boolean" = "and"

    def __post_init__(self) -> None:
        _check_bind_value(self.low)
        _check_bind_value(self.high)


@dataclass(frozen=True)
class BetweenColumns:
    """A column bounded by two other columns."""

    column: str
    low: str
    high: str
    negated: bool = False
    boolean: "Boolean" = "and"


@dataclass(frozen=True)
class Exists:
    query: "QueryBuilder"
    negated: bool = False
    boolean: "Boolean" = "and"


@dataclass(frozen=True)
class NestedPredicates:
    """A parenthesised group holding the predicates of another builder."""

    query: "QueryBuilder"
    negated: bool = False
    boolean: "Boolean" = "and"


@dataclass(frozen=True)
class RawPredicate:
    sql: str
    bindings: tuple[Any, ...] = ()
    boolean: "Boolean" = "and"

    def __post_init__(self) -> None:
        for value in self.bindings:
            _check_bind_value(value)


Predicate = Union[
    ColumnComparison,
    ColumnValueComparison,
    ScalarComparison,
    ColumnSubqueryComparison,
    DateComparison,
    NullCheck,
    InList,
    InSubquery,
    Between,
    BetweenColumns,
    Exists,
    NestedPredicates,
    RawPredicate,
]
