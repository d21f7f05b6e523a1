#!/usr/bin/env python3
"""
Composition query parser.

A composition query selects the templates a composition template applies
to. It is a list of clauses joined by '&':

    $framework==MVVMBasic|MVVMLight & wts.type==page & identity!=wts.Page.Blank

Fields are dotted names, optionally prefixed with '$' for context
parameters. Values may list alternatives separated by '|'.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

CLAUSE_PATTERN = re.compile(r"^(?P<field>\$?[\w.]+)(?P<operator>==|!=)(?P<value>[\w.\-]+(?:\|[\w.\-]+)*)$")


class InvalidCompositionQueryError(ValueError):
    """Raised when a composition query clause does not follow the grammar."""


@dataclass(frozen=True)
class QueryClause:
    field: str
    operator: str
    values: tuple[str, ...]


@dataclass(frozen=True)
class CompositionQuery:
    clauses: tuple[QueryClause, ...] = field(default_factory=tuple)


def parse_clause(text: str) -> QueryClause:
    """Parse a single 'field op value' clause."""
    compact = "".join(text.split())
    match = CLAUSE_PATTERN.match(compact)
    if not match:
        raise InvalidCompositionQueryError(f"Invalid query clause '{text.strip()}'")
    return QueryClause(
        field=match.group("field"),
        operator=match.group("operator"),
        values=tuple(match.group("value").split("|")),
    )


def parse(query: str | None) -> CompositionQuery:
    """Parse a composition query.

    Args:
        query: The query text. None or blank text yields an empty query.

    Returns:
        The parsed CompositionQuery

    Raises:
        InvalidCompositionQueryError: If any clause is malformed
    """
    if query is None or not query.strip():
        return CompositionQuery()

    clauses = [parse_clause(part) for part in query.split("&") if part.strip()]
    return CompositionQuery(tuple(clauses))
