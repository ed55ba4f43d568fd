"""In-memory expense tracking service with a REST API and a thin client."""

__all__ = [
    "cli",
    "client",
    "config",
    "database",
    "logging",
    "models",
    "schemas",
    "server",
    "sql_store",
    "store",
    "summary",
]

__version__ = "1.0.0"
