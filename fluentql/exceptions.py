from typing import Any, Optional

__all__ = (
    "FluentQLError",
    "ImproperConfigurationError",
    "InvalidOperatorError",
    "MissingTableError",
    "ParameterError",
    "SQLBuilderError",
    "SQLParsingError",
)


class FluentQLError(Exception):
    """Base exception class from which all fluentql exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``FluentQLError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class ImproperConfigurationError(FluentQLError):
    """Raised when a grammar configuration value is unusable."""


class SQLBuilderError(FluentQLError):
    """Issues building or generating SQL statements."""

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Issues building SQL statement."
        super().__init__(message)


class InvalidOperatorError(SQLBuilderError):
    """Raised when a comparison is constructed with an operator outside the allow-list."""

    operator: Any

    def __init__(self, operator: Any) -> None:
        super().__init__(f"Invalid comparison operator: {operator!r}")
        self.operator = operator


class MissingTableError(SQLBuilderError):
    """Raised when a statement is compiled before a table was set."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "No table was set; call table() or from_() before compiling.")


class SQLParsingError(FluentQLError):
    """Issues parsing a compiled SQL statement."""

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Issues parsing SQL statement."
        super().__init__(message)


class ParameterError(FluentQLError):
    """Raised when compiled parameters do not line up with the statement placeholders."""

    sql: Optional[str]

    def __init__(self, message: str, sql: Optional[str] = None) -> None:
        """Initialize with optional SQL context."""
        detail_message = message
        if sql:
            detail_message = f"{message}\nSQL: {sql}"
        super().__init__(detail=detail_message)
        self.sql = sql
