"""Grammar configuration shared by a builder and its sub-query children."""

from dataclasses import dataclass, replace
from typing import Any

from sqlglot.dialects.dialect import DialectType

from fluentql.exceptions import ImproperConfigurationError

__all__ = ("DEFAULT_GRAMMAR_CONFIG", "GrammarConfig")


@dataclass(frozen=True)
class GrammarConfig:
    """Configuration for SQL rendering."""

    quote_char: str = "`"
    """Character wrapped around every identifier. Embedded occurrences are doubled."""

    dialect: DialectType = "mysql"
    """sqlglot dialect used when a compiled statement is parsed for validation."""

    def __post_init__(self) -> None:
        if len(self.quote_char) != 1 or self.quote_char.isspace():
            msg = f"quote_char must be a single non-whitespace character, got {self.quote_char!r}"
            raise ImproperConfigurationError(msg)

    def replace(self, **kwargs: Any) -> "GrammarConfig":
        """Return a copy with the given fields replaced.

        Args:
            **kwargs: Fields to update.

        Returns:
            A new validated configuration.
        """
        return replace(self, **kwargs)


DEFAULT_GRAMMAR_CONFIG = GrammarConfig()
