"""Thin HTTP abstraction for talking to the Airtable REST API.

One method per remote verb rau needs.  Every method performs exactly one
request; there is no retry.  Failures are raised as ``rau.errors``:

- ``NetworkError``           when no response arrives (DNS, refused, timeout, TLS)
- ``RemoteError``            for any non-2xx status, carrying the raw body
- ``MalformedResponseError`` when a 2xx body is not the JSON we expect

``redact_auth()`` keeps bearer tokens out of debug logs.
"""

import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .config import DEFAULT_API_URL
from .errors import MalformedResponseError, NetworkError, RemoteError
from .models import Field, Record

logger = logging.getLogger(__name__)

# Airtable caps list pages at 100 records
MAX_PAGE_SIZE = 100


class AirtableResponse:
    """Normalized HTTP response wrapper."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        self._json = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Parse and cache the response body as JSON.

        Raises ``MalformedResponseError`` if the body is empty or not JSON.
        """
        if self._json is None:
            try:
                self._json = json.loads(self.body)
            except ValueError as e:
                raise MalformedResponseError(
                    f"Response is not valid JSON ({e}): {self.body[:200]!r}"
                ) from e
        return self._json


class AirtableClient:
    """HTTP client for one Airtable account.

    Args:
        api_key:   Personal access token or API key, sent as a bearer token.
        base_url:  API root (e.g. ``https://api.airtable.com/v0``).
        timeout:   Per-request timeout in seconds.
        session:   Optional ``requests.Session`` to send requests through.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_URL,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    # -- Public API ----------------------------------------------------------

    def fetch_tables(self, base_id: str) -> List[Dict[str, Any]]:
        """Return the raw table descriptors of a base from the metadata API."""
        resp = self._request("GET", f"/meta/bases/{_seg(base_id)}/tables")
        _check(resp, "fetch schema")
        tables = _expect_key(resp, "tables")
        if not isinstance(tables, list):
            raise MalformedResponseError("'tables' is not a list")
        return tables

    def table_fields(self, base_id: str, table_name: str) -> List[Field]:
        """Return the fields of the table named (or identified by) ``table_name``."""
        for table in self.fetch_tables(base_id):
            if not isinstance(table, dict):
                raise MalformedResponseError(f"Invalid table descriptor: {table!r}")
            if table_name in (table.get("name"), table.get("id")):
                return [Field.from_dict(f) for f in table.get("fields", [])]
        raise RemoteError("fetch schema", 404, f"Table not found: {table_name}")

    def list_records(
        self,
        base_id: str,
        table_name: str,
        max_records: int = MAX_PAGE_SIZE,
        view: Optional[str] = None,
    ) -> List[Record]:
        """Return the first page of records, at most ``max_records`` of them."""
        params: Dict[str, Any] = {"maxRecords": max_records}
        if view:
            params["view"] = view
        resp = self._request("GET", _table_path(base_id, table_name), params=params)
        _check(resp, "query recent records")
        return _records(resp)

    def get_record(self, base_id: str, table_name: str, record_id: str) -> Record:
        """Return one record with all of its non-empty fields."""
        path = f"{_table_path(base_id, table_name)}/{_seg(record_id)}"
        resp = self._request("GET", path)
        _check(resp, "query record")
        return Record.from_dict(resp.json())

    def update_record(
        self, base_id: str, table_name: str, record_id: str, fields: Dict[str, Any]
    ) -> Record:
        """PATCH ``fields`` onto an existing record; unnamed fields are untouched."""
        payload = {"records": [{"id": record_id, "fields": fields}]}
        resp = self._request("PATCH", _table_path(base_id, table_name), payload)
        _check(resp, "update record")
        return _first_record(resp)

    def create_record(self, base_id: str, table_name: str, fields: Dict[str, Any]) -> Record:
        """POST a new record and return it as the API echoes it back."""
        payload = {"records": [{"fields": fields}]}
        resp = self._request("POST", _table_path(base_id, table_name), payload)
        _check(resp, "create record")
        return _first_record(resp)

    # -- Internals -----------------------------------------------------------

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> AirtableResponse:
        """Execute a single HTTP request and normalize the response."""
        url = f"{self.base_url}{path}"
        headers = self._build_headers()
        logger.debug("%s %s params=%s headers=%s", method, url, params, redact_auth(headers))

        kwargs: Dict[str, Any] = {"headers": headers, "timeout": self.timeout}
        if params:
            kwargs["params"] = params
        if payload is not None:
            kwargs["json"] = payload

        try:
            resp = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise NetworkError(f"{method} {url} failed: {e}") from e

        logger.debug("%s %s -> %s", method, url, resp.status_code)
        return AirtableResponse(resp.status_code, resp.text)


def _seg(value: str) -> str:
    """Percent-encode one path segment (table names may contain spaces)."""
    return quote(value, safe="")


def _table_path(base_id: str, table_name: str) -> str:
    return f"/{_seg(base_id)}/{_seg(table_name)}"


def _check(resp: AirtableResponse, action: str):
    if not resp.ok:
        raise RemoteError(action, resp.status_code, resp.body)


def _expect_key(resp: AirtableResponse, key: str) -> Any:
    data = resp.json()
    if not isinstance(data, dict) or key not in data:
        raise MalformedResponseError(f"Response has no '{key}': {resp.body[:200]!r}")
    return data[key]


def _records(resp: AirtableResponse) -> List[Record]:
    records = _expect_key(resp, "records")
    if not isinstance(records, list):
        raise MalformedResponseError("'records' is not a list")
    return [Record.from_dict(r) for r in records]


def _first_record(resp: AirtableResponse) -> Record:
    records = _records(resp)
    if not records:
        raise MalformedResponseError("Response contains no records")
    return records[0]


def redact_auth(headers: Dict[str, str]) -> Dict[str, str]:
    """Return a copy of headers with Authorization values replaced by ``***REDACTED***``."""
    redacted = dict(headers)
    for key in list(redacted.keys()):
        if key.lower() == "authorization":
            redacted[key] = "***REDACTED***"
    return redacted
