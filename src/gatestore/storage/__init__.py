"""Storage adapter: engine creation, statement templates, and execution."""

from gatestore.storage.engine import Store, create_session_factory, create_store_engine
from gatestore.storage.statements import Statement, StatementSet, placeholders

__all__ = [
    "Statement",
    "StatementSet",
    "Store",
    "create_session_factory",
    "create_store_engine",
    "placeholders",
]
