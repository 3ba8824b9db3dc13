"""rau: CLI for querying and updating Airtable records.

Each invocation resolves a named table configuration, classifies its
arguments into one request (schema, fields, recent, get, update, create),
performs a single HTTP call against the Airtable REST API and prints the
result.  Table field names are cached on disk per configuration.
"""

__version__ = "0.3.0"
