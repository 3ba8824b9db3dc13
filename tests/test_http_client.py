"""Tests for the HTTP client (AirtableClient) against the mock Airtable server.

Covers each verb, bearer auth, error mapping (4xx/5xx, malformed bodies,
network failure), and secret redaction.
"""

import pytest
from rau.errors import MalformedResponseError, NetworkError, RemoteError
from rau.http_client import AirtableClient, AirtableResponse, redact_auth
from rau.models import Field
from tests.mock_airtable_server import MockAirtableServer


@pytest.fixture
def server():
    records = {"People": {"rec1": {"Name": "Ada", "Age": 36}, "rec2": {"Age": 40}}}
    with MockAirtableServer(records=records) as s:
        yield s


@pytest.fixture
def client(server):
    return AirtableClient(server.api_key, base_url=server.base_url)


def test_table_fields(client, server):
    fields = client.table_fields(server.base_id, "People")
    assert fields[0] == Field("Name", "singleLineText")
    assert [f.name for f in fields] == ["Name", "Age", "Tags", "Score", "Created"]


def test_table_fields_by_id(client, server):
    fields = client.table_fields(server.base_id, "tblPeople")
    assert len(fields) == 5


def test_table_fields_unknown_table(client, server):
    with pytest.raises(RemoteError) as exc:
        client.table_fields(server.base_id, "Nope")
    assert "Table not found: Nope" in str(exc.value)


def test_get_record(client, server):
    record = client.get_record(server.base_id, "People", "rec1")
    assert record.id == "rec1"
    assert record.fields == {"Name": "Ada", "Age": 36}
    assert record.created_time


def test_get_missing_record_raises_remote_error(client, server):
    with pytest.raises(RemoteError) as exc:
        client.get_record(server.base_id, "People", "recMissing")
    assert exc.value.status_code == 404
    assert "NOT_FOUND" in exc.value.body


def test_list_records_sends_limit_and_view(client, server):
    records = client.list_records(server.base_id, "People", view="Grid view")
    assert {r.id for r in records} == {"rec1", "rec2"}
    query = server.requests[-1]["query"]
    assert query == {"maxRecords": "100", "view": "Grid view"}


def test_list_records_respects_max(client, server):
    records = client.list_records(server.base_id, "People", max_records=1)
    assert len(records) == 1


def test_update_record(client, server):
    record = client.update_record(server.base_id, "People", "rec2", {"Name": "Bob"})
    assert record.fields == {"Name": "Bob", "Age": 40}
    sent = server.requests[-1]
    assert sent["method"] == "PATCH"
    assert sent["body"] == {"records": [{"id": "rec2", "fields": {"Name": "Bob"}}]}


def test_create_record(client, server):
    record = client.create_record(server.base_id, "People", {"Name": "Cy", "Tags": ["a"]})
    assert record.id.startswith("rec")
    assert server.records("People")[record.id] == {"Name": "Cy", "Tags": ["a"]}


def test_unknown_field_is_remote_error(client, server):
    with pytest.raises(RemoteError) as exc:
        client.update_record(server.base_id, "People", "rec1", {"Bogus": 1})
    assert exc.value.status_code == 422
    assert "UNKNOWN_FIELD_NAME" in str(exc.value)


def test_bearer_auth_header(client, server):
    client.get_record(server.base_id, "People", "rec1")
    assert server.requests[-1]["authorization"] == f"Bearer {server.api_key}"


def test_wrong_key_is_401(server):
    client = AirtableClient("wrong", base_url=server.base_url)
    with pytest.raises(RemoteError) as exc:
        client.get_record(server.base_id, "People", "rec1")
    assert exc.value.status_code == 401


def test_table_name_with_spaces():
    tables = {"Team Members": [{"name": "Name", "type": "singleLineText"}]}
    records = {"Team Members": {"recA": {"Name": "Dee"}}}
    with MockAirtableServer(tables=tables, records=records) as server:
        client = AirtableClient(server.api_key, base_url=server.base_url)
        record = client.get_record(server.base_id, "Team Members", "recA")
        assert record.fields == {"Name": "Dee"}
        assert server.requests[-1]["path"] == "/v0/appTEST/Team Members/recA"


def test_server_error():
    with MockAirtableServer(non_conformances={"server_error": True}) as server:
        client = AirtableClient(server.api_key, base_url=server.base_url)
        with pytest.raises(RemoteError) as exc:
            client.list_records(server.base_id, "People")
        assert exc.value.status_code == 500
        assert "Failed to query recent records. Status: 500" in str(exc.value)


def test_malformed_body():
    with MockAirtableServer(non_conformances={"malformed_body": True}) as server:
        client = AirtableClient(server.api_key, base_url=server.base_url)
        with pytest.raises(MalformedResponseError):
            client.get_record(server.base_id, "People", "rec1")


def test_network_failure():
    # Grab a free port, then close the server so nothing listens on it
    with MockAirtableServer() as server:
        url = server.base_url
    client = AirtableClient("key", base_url=url, timeout=2)
    with pytest.raises(NetworkError):
        client.get_record("appTEST", "People", "rec1")


def test_no_retry_on_failure():
    with MockAirtableServer(non_conformances={"server_error": True}) as server:
        client = AirtableClient(server.api_key, base_url=server.base_url)
        with pytest.raises(RemoteError):
            client.get_record(server.base_id, "People", "rec1")
        assert len(server.requests) == 1


def test_response_json_empty_body():
    resp = AirtableResponse(200, "")
    with pytest.raises(MalformedResponseError):
        resp.json()


def test_redact_auth():
    headers = {
        "Authorization": "Bearer secret-token-123",
        "Content-Type": "application/json",
    }
    redacted = redact_auth(headers)
    assert redacted["Authorization"] == "***REDACTED***"
    assert redacted["Content-Type"] == "application/json"
    # Original should not be mutated
    assert headers["Authorization"] == "Bearer secret-token-123"
