"""fluentql: fluent SELECT building with positional parameters."""

from fluentql import builder, exceptions, typing
from fluentql.__metadata__ import __version__
from fluentql.builder import CompiledQuery, Operator, QueryBuilder, query, table
from fluentql.config import GrammarConfig
from fluentql.exceptions import (
    FluentQLError,
    ImproperConfigurationError,
    InvalidOperatorError,
    MissingTableError,
    ParameterError,
    SQLBuilderError,
    SQLParsingError,
)

__all__ = (
    "CompiledQuery",
    "FluentQLError",
    "GrammarConfig",
    "ImproperConfigurationError",
    "InvalidOperatorError",
    "MissingTableError",
    "Operator",
    "ParameterError",
    "QueryBuilder",
    "SQLBuilderError",
    "SQLParsingError",
    "__version__",
    "builder",
    "exceptions",
    "query",
    "table",
    "typing",
)
