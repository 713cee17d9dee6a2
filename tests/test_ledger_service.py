"""Tests for role-checked writes in the ledger service."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from cafeledger.errors import PermissionDenied, StorageError, ValidationError
from cafeledger.models.transaction import NewTransaction
from cafeledger.services.ledger_service import LedgerService
from cafeledger.services.recurring import recurring_reminders

UTC = timezone.utc
NOW = datetime(2024, 3, 13, 15, 30, tzinfo=UTC)


@pytest.fixture
def service(transaction_repo, note_repo) -> LedgerService:
    return LedgerService(transaction_repo, note_repo, clock=lambda: NOW)


def _rent(**overrides) -> NewTransaction:
    fields = {
        "amount": 5000.0,
        "type": "expense",
        "category": "Rent",
        "date": datetime(2024, 2, 1, 9, tzinfo=UTC),
        "is_recurring": True,
        "payment_method": "online",
    }
    fields.update(overrides)
    return NewTransaction(**fields)


def test_every_role_may_create_transactions(service):
    for role in ("admin", "moderator", "user"):
        service.add_transaction(role, _rent(is_recurring=None))

    assert len(service.load().transactions) == 3


def test_unknown_role_cannot_write(service):
    with pytest.raises(PermissionDenied):
        service.add_transaction(None, _rent())

    assert service.load().transactions == []


@pytest.mark.parametrize("role", ["moderator", "user"])
def test_only_admin_deletes_or_clears(service, role):
    service.add_transaction("admin", _rent())
    service.add_note("admin", "keep me")
    tx_id = service.load().transactions[0].id
    note_id = service.load().notes[0].id

    with pytest.raises(PermissionDenied):
        service.delete_transaction(role, tx_id)
    with pytest.raises(PermissionDenied):
        service.clear_all(role)
    with pytest.raises(PermissionDenied):
        service.delete_note(role, note_id)

    snapshot = service.load()
    assert len(snapshot.transactions) == 1
    assert len(snapshot.notes) == 1


def test_admin_delete_and_clear(service):
    service.add_transaction("admin", _rent())
    service.add_transaction("admin", _rent(category="Salary"))
    first = service.load().transactions[-1].id

    service.delete_transaction("admin", first)
    service.delete_transaction("admin", "missing")
    assert [tx.category for tx in service.load().transactions] == ["Salary"]

    service.clear_all("admin")
    assert service.load().transactions == []


def test_user_cannot_add_notes(service):
    with pytest.raises(PermissionDenied):
        service.add_note("user", "hello")

    service.add_note("moderator", "  hello  ")
    assert [note.text for note in service.load().notes] == ["hello"]


def test_blank_note_rejected(service):
    with pytest.raises(ValidationError):
        service.add_note("admin", "   ")


def test_add_recurring_now_clears_the_reminder(service):
    service.add_transaction("admin", _rent())
    template = service.load().transactions[0]
    assert recurring_reminders(service.load().transactions, now=NOW, tz=UTC) == [template]

    new = service.add_recurring_now("moderator", template.id)

    reloaded = service.load().transactions
    assert new.date == NOW
    assert len(reloaded) == 2
    assert recurring_reminders(reloaded, now=NOW, tz=UTC) == []


def test_user_cannot_add_recurring(service):
    service.add_transaction("admin", _rent())
    template_id = service.load().transactions[0].id

    with pytest.raises(PermissionDenied):
        service.add_recurring_now("user", template_id)


def test_add_recurring_unknown_template(service):
    with pytest.raises(ValidationError):
        service.add_recurring_now("admin", "nope")


def test_storage_failure_leaves_state(note_repo):
    class FailingRepo:
        def list_transactions(self):
            return []

        def create_transaction(self, new):
            raise StorageError("rejected")

    service = LedgerService(FailingRepo(), note_repo)

    with pytest.raises(StorageError):
        service.add_transaction("admin", _rent())
    assert service.load().transactions == []
