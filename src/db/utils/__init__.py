"""
Database Utilities Module

Submodules:
- db_transaction: commit/rollback wrappers around a session
- kv_store: namespaced key-value persistence on top of ``kv_entries``
"""

from .db_transaction import DatabaseOperationError, db_transaction
from .kv_store import CAMPAIGN_STATE_NAMESPACE, METADATA_NAMESPACE, KeyValueStore

__all__ = [
    "DatabaseOperationError",
    "db_transaction",
    "KeyValueStore",
    "METADATA_NAMESPACE",
    "CAMPAIGN_STATE_NAMESPACE",
]
