"""Perform a classified request and render its result.

Each request kind maps to exactly one remote call.  The only exception is a
bare create on a cold field cache, which has to fetch the schema first to
know which fields to send.
"""

import json
import logging
from typing import Any, List

import click

from .classifier import Request
from .config import TableConfig
from .field_cache import FieldCache
from .http_client import AirtableClient
from .models import Record, updatable_names

logger = logging.getLogger(__name__)

NO_NAME = "<no name>"
NO_VALUE = "<no value>"


def dispatch(
    request: Request,
    config: TableConfig,
    client: AirtableClient,
    cache: FieldCache,
    json_output: bool = False,
) -> int:
    """Run ``request`` against the table in ``config``.  Returns an exit code.

    Failures propagate as ``rau.errors.RauError`` subclasses.
    """
    logger.debug("Dispatching %r against %r", request, config)
    handler = _HANDLERS[request.kind]
    handler(request, config, client, cache, json_output)
    return 0


def _schema(request, config, client, cache, json_output):
    fields = client.table_fields(config.base_id, config.table_name)
    _echo_json([f.to_dict() for f in fields])


def _fields(request, config, client, cache, json_output):
    fields = cache.refresh(config, client)
    _echo_json(updatable_names(fields))


def _recent(request, config, client, cache, json_output):
    records = client.list_records(config.base_id, config.table_name, view=config.view)
    if json_output:
        _echo_json([r.to_dict() for r in records])
        return
    for record in records:
        name = record.fields.get(config.name_field)
        if not isinstance(name, str):
            name = NO_NAME
        click.echo(f"ID: {record.id}, Name: {name}")


def _get(request, config, client, cache, json_output):
    record = client.get_record(config.base_id, config.table_name, request.record_id)
    if json_output:
        _echo_json(record.to_dict())
        return
    for name, value in record.fields.items():
        click.echo(f"{name}: {_format_value(value)}")


def _query(request, config, client, cache, json_output):
    record = client.get_record(config.base_id, config.table_name, request.record_id)
    selected = project(record, request.field_names)
    if json_output:
        _echo_json({"id": record.id, "fields": selected})
        return
    for name in request.field_names:
        if name in selected:
            click.echo(f"{name}: {_format_value(selected[name])}")
        else:
            click.echo(f"{name}: {NO_VALUE}")


def _update(request, config, client, cache, json_output):
    record = client.update_record(
        config.base_id, config.table_name, request.record_id, request.assignments
    )
    if json_output:
        _echo_json(record.to_dict())
    else:
        click.echo("Updated Record")


def _create(request, config, client, cache, json_output):
    if request.assignments:
        fields = dict(request.assignments)
    else:
        fields = {name: None for name in updatable_names(cache.read(config, client))}
    record = client.create_record(config.base_id, config.table_name, fields)
    if json_output:
        _echo_json(record.to_dict())
        return
    click.echo("Created Record ID", err=True)
    click.echo(record.id)


_HANDLERS = {
    Request.SCHEMA: _schema,
    Request.FIELDS: _fields,
    Request.RECENT: _recent,
    Request.GET: _get,
    Request.QUERY: _query,
    Request.UPDATE: _update,
    Request.CREATE: _create,
}


def project(record: Record, names: List[str]) -> dict:
    """Restrict a record's fields to ``names``; absent fields are left out."""
    return {n: record.fields[n] for n in names if n in record.fields}


def _format_value(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _echo_json(data: Any):
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))
