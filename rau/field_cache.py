"""On-disk cache of table fields, keyed by configuration name.

The cache file is a single JSON object::

    {"people": [{"name": "Name", "type": "singleLineText"}, ...], ...}

Entries never expire; ``refresh()`` (the ``--fields`` request) rewrites one
entry and keeps the others.  Writes go through a temporary file in the same
directory followed by ``os.replace`` so readers never see a partial file.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from .config import TableConfig
from .errors import CacheFileError, RauError
from .http_client import AirtableClient
from .models import Field

logger = logging.getLogger(__name__)

DEFAULT_CACHE_PATH = Path.home() / ".rau" / "fields_cache.json"


class FieldCache:
    """Field lists per configuration, persisted to ``path``."""

    def __init__(self, path=None):
        self.path = Path(path) if path else DEFAULT_CACHE_PATH

    def cached(self, name: str) -> Optional[List[Field]]:
        """Return the cached fields for ``name`` without touching the network."""
        entry = self._load().get(name)
        if entry is None:
            return None
        try:
            return [Field.from_dict(f) for f in entry]
        except (RauError, TypeError):
            logger.warning("Ignoring corrupt cache entry for '%s' in %s", name, self.path)
            return None

    def read(self, config: TableConfig, client: AirtableClient) -> List[Field]:
        """Return cached fields for ``config``, fetching and storing them on a miss."""
        fields = self.cached(config.name)
        if fields is not None:
            logger.debug("Field cache hit for '%s'", config.name)
            return fields
        logger.debug("Field cache miss for '%s'", config.name)
        return self.refresh(config, client)

    def refresh(self, config: TableConfig, client: AirtableClient) -> List[Field]:
        """Fetch the table schema and overwrite the entry for ``config``."""
        fields = client.table_fields(config.base_id, config.table_name)
        data = self._load()
        data[config.name] = [f.to_dict() for f in fields]
        self._write(data)
        logger.debug("Cached %d fields for '%s' in %s", len(fields), config.name, self.path)
        return fields

    # -- Internals -----------------------------------------------------------

    def _load(self) -> Dict[str, list]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable field cache %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring field cache %s: not a JSON object", self.path)
            return {}
        return data

    def _write(self, data: Dict[str, list]):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
        except OSError as e:
            raise CacheFileError(f"Cannot write field cache {self.path}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            os.replace(tmp, self.path)
        except OSError as e:
            _discard(tmp)
            raise CacheFileError(f"Cannot write field cache {self.path}: {e}") from e
        except BaseException:
            _discard(tmp)
            raise


def _discard(tmp: str):
    try:
        os.unlink(tmp)
    except FileNotFoundError:
        pass
