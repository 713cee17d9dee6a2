"""SQLModel table and entry exports."""

from .note import Note, NoteRecord
from .settings import DeviceSetting
from .transaction import NewTransaction, Transaction, TransactionRecord

RECORD_TABLES = (TransactionRecord.__table__, NoteRecord.__table__)
DEVICE_TABLES = (DeviceSetting.__table__,)

__all__ = [
    "DEVICE_TABLES",
    "DeviceSetting",
    "NewTransaction",
    "Note",
    "NoteRecord",
    "RECORD_TABLES",
    "Transaction",
    "TransactionRecord",
]
