from __future__ import annotations

import pytest

from fluentql import QueryBuilder


@pytest.fixture
def builder() -> QueryBuilder:
    return QueryBuilder()


@pytest.fixture
def post_count():
    """Callback configuring a correlated ``count(*)`` over posts."""

    def configure(query: QueryBuilder) -> None:
        query.from_("posts").where_column("id", "=", "users.id").select_raw("count(*)")

    return configure
