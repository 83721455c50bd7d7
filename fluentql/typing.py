from collections.abc import Callable, Mapping, Sequence
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Final, Literal, Union

from typing_extensions import TypeAlias

if TYPE_CHECKING:
    from fluentql.builder._select import QueryBuilder

__all__ = (
    "BIND_VALUE_TYPES",
    "BindValue",
    "Boolean",
    "ConfigureCallback",
    "Empty",
    "EmptyType",
    "SubqueryInput",
    "WhereEntries",
)


class _EmptyEnum(Enum):
    """A sentinel enum used as placeholder."""

    EMPTY = 0


EmptyType = Literal[_EmptyEnum.EMPTY]
Empty: Final = _EmptyEnum.EMPTY
"""Marks an argument that was not supplied, so ``None`` stays usable as a bind value."""

BindValue: TypeAlias = Union[int, float, str, bool, None, Decimal, date, datetime, time]
"""Values a positional DB-API driver can bind."""

BIND_VALUE_TYPES: Final = (int, float, str, bool, Decimal, date, datetime, time, type(None))

Boolean: TypeAlias = Literal["and", "or"]
"""Connector placed before a predicate when the WHERE clause is rendered."""

ConfigureCallback: TypeAlias = "Callable[[QueryBuilder], Any]"
"""Callback that configures a freshly created child builder. Its return value is ignored."""

SubqueryInput: TypeAlias = "Union[QueryBuilder, ConfigureCallback]"

WhereEntries: TypeAlias = Union[Mapping[str, Any], Sequence[Sequence[Any]]]
"""Several ``where`` calls at once: ``{column: value}`` or a list of argument tuples."""
