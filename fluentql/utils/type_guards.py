"""Type guard functions for runtime type checking in fluentql.

These checks let the type checker narrow the loosely typed arguments accepted
by the fluent ``where`` overloads.
"""

from typing import TYPE_CHECKING, Any

from fluentql.typing import BIND_VALUE_TYPES

if TYPE_CHECKING:
    from typing_extensions import TypeGuard

    from fluentql.builder._select import QueryBuilder
    from fluentql.typing import BindValue, ConfigureCallback

__all__ = ("is_bind_value", "is_configure_callback", "is_query_builder")


def is_bind_value(obj: Any) -> "TypeGuard[BindValue]":
    """Check if a value can be bound to a positional placeholder.

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    return isinstance(obj, BIND_VALUE_TYPES)


def is_query_builder(obj: Any) -> "TypeGuard[QueryBuilder]":
    """Check if a value is a query builder.

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    from fluentql.builder._select import QueryBuilder

    return isinstance(obj, QueryBuilder)


def is_configure_callback(obj: Any) -> "TypeGuard[ConfigureCallback]":
    """Check if a value is a callback that configures a child builder.

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    return callable(obj) and not isinstance(obj, type) and not is_query_builder(obj)
