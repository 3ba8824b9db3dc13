"""Loading and resolving named table configurations.

The config file is TOML with an optional global ``api_key`` and a
``[tables]`` table mapping configuration names to entries::

    api_key = "key..."

    [tables]
    people = { base_id = "app123", table_name = "People" }

    [tables.tasks]
    base_id = "app456"
    table_name = "Tasks"
    api_key = "key-for-this-base"
    view = "All tasks"
    name_field = "Title"

``AIRTABLE_API_KEY`` overrides the global key and ``AIRTABLE_API_URL`` the
API root.  A per-entry ``api_key`` always wins.
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigFileError, ConfigNotFoundError, MissingCredentialsError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".rau" / "config.toml"
DEFAULT_API_URL = "https://api.airtable.com/v0"
DEFAULT_VIEW = "Grid view"
DEFAULT_NAME_FIELD = "Name"

ENV_API_KEY = "AIRTABLE_API_KEY"
ENV_API_URL = "AIRTABLE_API_URL"


class TableConfig:
    """One named table: where it lives and how to authenticate against it."""

    def __init__(
        self,
        name: str,
        base_id: str,
        table_name: str,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        view: str = DEFAULT_VIEW,
        name_field: str = DEFAULT_NAME_FIELD,
    ):
        self.name = name
        self.base_id = base_id
        self.table_name = table_name
        self.api_key = api_key
        self.api_url = api_url
        self.view = view
        self.name_field = name_field

    def __repr__(self):
        return (
            f"TableConfig(name={self.name!r}, base_id={self.base_id!r}, "
            f"table_name={self.table_name!r})"
        )


class Settings:
    """The parsed config file plus environment overrides.

    Args:
        tables:   Raw per-configuration entries from the ``[tables]`` table.
        api_key:  Process-wide API key, already merged with the environment.
        api_url:  Root URL of the Airtable REST API.
        path:     File the settings were read from, for error messages.
    """

    def __init__(
        self,
        tables: Dict[str, Dict[str, Any]],
        api_key: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        path: Optional[str] = None,
    ):
        self.tables = tables
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.path = path

    @classmethod
    def load(cls, path=None, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Read settings from ``path`` (default ``~/.rau/config.toml``)."""
        if environ is None:
            environ = os.environ
        path = Path(path) if path else DEFAULT_CONFIG_PATH
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError:
            raise ConfigFileError(f"Config file not found: {path}") from None
        except OSError as e:
            raise ConfigFileError(f"Cannot read config file {path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigFileError(f"Invalid TOML in {path}: {e}") from e
        logger.debug("Loaded config from %s", path)
        return cls.from_dict(data, environ=environ, path=str(path))

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        environ: Optional[Mapping[str, str]] = None,
        path: Optional[str] = None,
    ) -> "Settings":
        if environ is None:
            environ = os.environ
        tables = data.get("tables", {})
        if not isinstance(tables, dict):
            raise ConfigFileError(f"'tables' must be a table in {path or 'config'}")

        api_key = environ.get(ENV_API_KEY) or _optional_str(data, "api_key", "config")
        api_url = (
            environ.get(ENV_API_URL)
            or _optional_str(data, "api_url", "config")
            or DEFAULT_API_URL
        )
        return cls(tables, api_key=api_key, api_url=api_url, path=path)

    def names(self):
        """Configuration names, in file order."""
        return list(self.tables)

    def resolve(self, name: str) -> TableConfig:
        """Return the fully resolved :class:`TableConfig` for ``name``.

        Raises:
            ConfigNotFoundError:     ``name`` has no entry.
            ConfigFileError:         the entry lacks ``base_id`` or ``table_name``,
                                     or a value is not a string.
            MissingCredentialsError: neither the entry nor the globals carry a key.
        """
        entry = self.tables.get(name)
        if entry is None:
            raise ConfigNotFoundError(name, self.path)
        if not isinstance(entry, dict):
            raise ConfigFileError(f"Configuration '{name}' must be a table")

        missing = [k for k in ("base_id", "table_name") if not entry.get(k)]
        if missing:
            raise ConfigFileError(
                f"Configuration '{name}' is missing: {', '.join(missing)}"
            )
        where = f"configuration '{name}'"
        base_id = _optional_str(entry, "base_id", where)
        table_name = _optional_str(entry, "table_name", where)
        view = _optional_str(entry, "view", where) or DEFAULT_VIEW
        name_field = _optional_str(entry, "name_field", where) or DEFAULT_NAME_FIELD

        api_key = _optional_str(entry, "api_key", where) or self.api_key
        if not api_key:
            raise MissingCredentialsError(
                f"No API key for configuration '{name}': set api_key in the "
                f"config file or the {ENV_API_KEY} environment variable"
            )

        return TableConfig(
            name,
            base_id,
            table_name,
            api_key,
            api_url=self.api_url,
            view=view,
            name_field=name_field,
        )


def _optional_str(table: Dict[str, Any], key: str, where: str) -> Optional[str]:
    """Return ``table[key]`` if present; it must be a string."""
    value = table.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigFileError(
            f"'{key}' in {where} must be a string, got {type(value).__name__}"
        )
    return value
