"""Classify command-line arguments into a single request.

Rules, in priority order:

1. A flag (schema, fields, recent) wins; positional arguments are ignored.
   With several flags the order is schema, fields, recent.
2. No arguments at all: create a record with every updatable field empty.
3. First argument without ``=``: it is a record id.  The rest must be all
   bare field names (query) or all ``key=value`` pairs (update).
4. First argument with ``=``: every argument is an assignment (create).

Mixing bare names and assignments is malformed input.
"""

import json
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .errors import MalformedArgumentError


class Request:
    """A classified invocation, ready to be dispatched."""

    SCHEMA = "schema"
    FIELDS = "fields"
    RECENT = "recent"
    GET = "get"
    QUERY = "query"
    UPDATE = "update"
    CREATE = "create"

    def __init__(
        self,
        kind: str,
        record_id: Optional[str] = None,
        field_names: Optional[List[str]] = None,
        assignments: Optional[Dict[str, Any]] = None,
    ):
        self.kind = kind
        self.record_id = record_id
        self.field_names = field_names or []
        self.assignments = assignments or {}

    def __eq__(self, other):
        if not isinstance(other, Request):
            return NotImplemented
        return (self.kind, self.record_id, self.field_names, self.assignments) == (
            other.kind, other.record_id, other.field_names, other.assignments,
        )

    def __repr__(self):
        return (
            f"Request({self.kind!r}, record_id={self.record_id!r}, "
            f"field_names={self.field_names!r}, assignments={self.assignments!r})"
        )


def classify(
    args: Sequence[str],
    schema: bool = False,
    fields: bool = False,
    recent: bool = False,
) -> Request:
    """Return the :class:`Request` implied by ``args`` and the flags.

    Raises:
        MalformedArgumentError: on mixed tokens or an assignment with no key.
    """
    if schema:
        return Request(Request.SCHEMA)
    if fields:
        return Request(Request.FIELDS)
    if recent:
        return Request(Request.RECENT)

    args = list(args)
    if not args:
        return Request(Request.CREATE)

    first, rest = args[0], args[1:]
    if "=" not in first:
        if not rest:
            return Request(Request.GET, record_id=first)
        with_eq = [t for t in rest if "=" in t]
        if not with_eq:
            return Request(Request.QUERY, record_id=first, field_names=rest)
        if len(with_eq) != len(rest):
            bare = [t for t in rest if "=" not in t]
            raise MalformedArgumentError(
                f"Cannot mix field names and key=value pairs: {', '.join(bare)}"
            )
        return Request(Request.UPDATE, record_id=first, assignments=parse_assignments(rest))

    return Request(Request.CREATE, assignments=parse_assignments(args))


def parse_assignments(tokens: Sequence[str]) -> Dict[str, Any]:
    """Turn ``key=value`` tokens into a fields mapping.  Later keys win."""
    result: Dict[str, Any] = {}
    for token in tokens:
        key, value = split_assignment(token)
        result[key] = value
    return result


def split_assignment(token: str) -> Tuple[str, Any]:
    """Split on the first ``=`` and decode the value."""
    if "=" not in token:
        raise MalformedArgumentError(f"Invalid field format: {token}")
    key, raw = token.split("=", 1)
    if not key:
        raise MalformedArgumentError(f"Invalid field format: {token}")
    return key, parse_value(raw)


def parse_value(raw: str) -> Any:
    """Decode ``raw`` as JSON when it parses, else keep it as a string.

    ``count=3`` sends a number, ``tags=["a","b"]`` a list, ``done=true`` a
    boolean and ``name=Ada`` the string ``"Ada"``.  ``NaN`` and
    ``Infinity`` are not JSON and stay strings.
    """
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except ValueError:
        return raw


def _reject_constant(name: str):
    raise ValueError(f"not a JSON value: {name}")
