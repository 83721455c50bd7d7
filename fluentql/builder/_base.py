"""Compiled statement handed to an external executor."""

from dataclasses import dataclass, field
from typing import Any, Optional

import sqlglot
from sqlglot import exp
from sqlglot.dialects.dialect import DialectType
from sqlglot.errors import SqlglotError

from fluentql.exceptions import ParameterError, SQLParsingError

__all__ = ("CompiledQuery",)


@dataclass(frozen=True)
class CompiledQuery:
    """A compiled SELECT statement with positional parameters."""

    sql: str
    parameters: tuple[Any, ...] = field(default_factory=tuple)
    dialect: Optional[DialectType] = None

    def as_tuple(self) -> tuple[str, list[Any]]:
        """Return ``(sql, parameters)`` in the shape DB-API ``cursor.execute`` expects."""
        return self.sql, list(self.parameters)

    def parse(self) -> exp.Expression:
        """Parse the statement with sqlglot.

        Raises:
            SQLParsingError: If sqlglot cannot parse the statement.

        Returns:
            exp.Expression: The parsed statement.
        """
        try:
            expression = sqlglot.parse_one(self.sql, read=self.dialect)
        except SqlglotError as e:
            msg = f"Failed to parse compiled SQL: {e}"
            raise SQLParsingError(msg) from e
        if expression is None:
            msg = "Compiled SQL produced no statement."
            raise SQLParsingError(msg)
        return expression

    def validate(self) -> exp.Expression:
        """Parse the statement and check that each placeholder has exactly one parameter.

        Raises:
            ParameterError: If the placeholder and parameter counts differ.

        Returns:
            exp.Expression: The parsed statement.
        """
        expression = self.parse()
        placeholder_count = sum(1 for _ in expression.find_all(exp.Placeholder))
        if placeholder_count != len(self.parameters):
            msg = f"Statement has {placeholder_count} placeholders but {len(self.parameters)} parameters were bound."
            raise ParameterError(msg, self.sql)
        return expression
