from .ledger import (
    StoreError,
    StoreReadError,
    StoreWriteError,
    StoreCorruptionError,
    LedgerStore,
    InMemoryLedgerStore,
    CompletionLedger,
)
from .catalog import HabitCatalog, InMemoryCatalog
from .json_store import BackupInfo, BackupManager, JsonLedgerStore

__all__ = [
    'StoreError',
    'StoreReadError',
    'StoreWriteError',
    'StoreCorruptionError',
    'LedgerStore',
    'InMemoryLedgerStore',
    'CompletionLedger',
    'HabitCatalog',
    'InMemoryCatalog',
    'BackupInfo',
    'BackupManager',
    'JsonLedgerStore',
]
