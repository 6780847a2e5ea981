from typing import Optional

from sqlalchemy.orm import Session

from src.db.models.kv_entries import KeyValueEntry
from src.db.utils.db_transaction import db_transaction, read_db_transaction

METADATA_NAMESPACE = "metadata"
CAMPAIGN_STATE_NAMESPACE = "campaign_state"


class KeyValueStore:
    """String values keyed by ``(namespace, key)``; last write wins."""

    def __init__(self, namespace: str, db: Session) -> None:
        self.namespace = namespace
        self.db = db

    def put(self, key: str, value: str) -> None:
        with db_transaction(self.db):
            entry = self.db.get(KeyValueEntry, (self.namespace, key))
            if entry is None:
                self.db.add(
                    KeyValueEntry(namespace=self.namespace, key=key, value=value)
                )
            else:
                entry.value = value

    def get(self, key: str) -> Optional[str]:
        with read_db_transaction(self.db, namespace=self.namespace, key=key):
            entry = self.db.get(KeyValueEntry, (self.namespace, key))
            return None if entry is None else entry.value
