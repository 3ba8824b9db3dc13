"""Plain containers for table fields and records."""

from typing import Any, Dict, List, Optional

from .errors import MalformedResponseError

# Field types whose values Airtable computes; writes to them are rejected.
COMPUTED_FIELD_TYPES = frozenset({
    "computed",
    "formula",
    "rollup",
    "lookup",
    "multipleLookupValues",
    "count",
    "autoNumber",
    "createdTime",
    "lastModifiedTime",
    "createdBy",
    "lastModifiedBy",
    "button",
})


class Field:
    """A single table column as reported by the metadata API."""

    def __init__(self, name: str, type: str):
        self.name = name
        self.type = type

    @property
    def updatable(self) -> bool:
        return self.type not in COMPUTED_FIELD_TYPES

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "type": self.type}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Field":
        try:
            return cls(data["name"], data.get("type", ""))
        except (KeyError, TypeError, AttributeError):
            raise MalformedResponseError(f"Invalid field definition: {data!r}") from None

    def __eq__(self, other):
        return isinstance(other, Field) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Field({self.name!r}, {self.type!r})"


class Record:
    """One row of a table.  Field values are loosely typed JSON."""

    def __init__(self, id: str, fields: Dict[str, Any], created_time: Optional[str] = None):
        self.id = id
        self.fields = fields
        self.created_time = created_time

    @classmethod
    def from_dict(cls, data: Any) -> "Record":
        if not isinstance(data, dict) or "id" not in data:
            raise MalformedResponseError(f"Invalid record in response: {data!r}")
        fields = data.get("fields") or {}
        if not isinstance(fields, dict):
            raise MalformedResponseError(f"Record {data['id']} has non-object fields")
        return cls(data["id"], fields, data.get("createdTime"))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "fields": self.fields}
        if self.created_time:
            data["createdTime"] = self.created_time
        return data


def updatable_names(fields: List[Field]) -> List[str]:
    """Names of the fields a client may write, in table order."""
    return [f.name for f in fields if f.updatable]
