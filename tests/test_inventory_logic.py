"""
Unit tests for stock-transaction math and recording.
"""

import uuid
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError

from clinic.models.all_models import (
    InventoryCategory, InventoryItem, InventoryTransaction, Profile, TransactionType, UserRole
)
from clinic.services.inventory import (
    MAX_STOCK, StockTransactionError, compute_new_stock, record_stock_transaction
)
from tests.conftest import make_staff


# ── Tests: compute_new_stock ─────────────────────────────────────────

def test_intake_adds_quantity():
    assert compute_new_stock(10, TransactionType.IN, 5) == 15


def test_withdrawal_subtracts_quantity():
    assert compute_new_stock(5, TransactionType.OUT, 3) == 2


def test_withdrawal_clamps_at_zero():
    assert compute_new_stock(5, TransactionType.OUT, 8, reject_overdraw=False) == 0


def test_adjustment_sets_absolute_stock():
    assert compute_new_stock(40, TransactionType.ADJUSTMENT, 12) == 12


def test_adjustment_to_zero_is_allowed():
    assert compute_new_stock(40, TransactionType.ADJUSTMENT, 0) == 0


def test_string_transaction_type_is_accepted():
    assert compute_new_stock(7, "out", 2) == 5


@pytest.mark.parametrize("transaction_type", [TransactionType.IN, TransactionType.OUT])
def test_zero_quantity_rejected_for_in_and_out(transaction_type):
    with pytest.raises(StockTransactionError):
        compute_new_stock(5, transaction_type, 0)


def test_negative_adjustment_rejected():
    with pytest.raises(StockTransactionError):
        compute_new_stock(5, TransactionType.ADJUSTMENT, -1)


def test_overdraw_rejected_when_enabled():
    with pytest.raises(StockTransactionError) as e:
        compute_new_stock(5, TransactionType.OUT, 8, reject_overdraw=True)
    assert "only 5 in stock" in str(e.value)


def test_exact_withdrawal_allowed_when_overdraw_rejected():
    assert compute_new_stock(5, TransactionType.OUT, 5, reject_overdraw=True) == 0


def test_intake_cannot_exceed_column_range():
    with pytest.raises(StockTransactionError):
        compute_new_stock(MAX_STOCK, TransactionType.IN, 1)


def test_overdraw_setting_used_by_default(monkeypatch):
    from clinic.config import settings
    monkeypatch.setattr(settings, "REJECT_STOCK_OVERDRAW", True)
    with pytest.raises(StockTransactionError):
        compute_new_stock(1, TransactionType.OUT, 2)


# ── Tests: record_stock_transaction ──────────────────────────────────

@pytest.fixture()
def stocked_item(db_session):
    category = InventoryCategory(name="Consumables")
    item = InventoryItem(name="Gauze", category=category, current_stock=5, min_stock_level=2)
    db_session.add_all([category, item])
    db_session.commit()
    db_session.refresh(item)
    return item


def _actor(db_session):
    staff = make_staff(db_session, "nurse@clinic.rs", UserRole.NURSE, "Nina Nurse")
    return db_session.query(Profile).filter(Profile.id == staff.profile_id).one()


def test_record_withdrawal_updates_item_and_logs(db_session, stocked_item):
    actor = _actor(db_session)

    item, transaction = record_stock_transaction(
        db_session, stocked_item.id, TransactionType.OUT, 8, actor, reason="Ward restock"
    )

    assert item.current_stock == 0
    assert transaction.quantity == 8
    assert transaction.transaction_type == TransactionType.OUT
    assert transaction.performed_by == actor.id
    assert transaction.reason == "Ward restock"
    assert db_session.query(InventoryTransaction).count() == 1


def test_record_blank_reason_stored_as_null(db_session, stocked_item):
    actor = _actor(db_session)

    _, transaction = record_stock_transaction(
        db_session, stocked_item.id, TransactionType.IN, 3, actor, reason=""
    )

    assert transaction.reason is None


def test_record_unknown_item_returns_nothing(db_session):
    actor = _actor(db_session)

    assert record_stock_transaction(
        db_session, uuid.uuid4(), TransactionType.IN, 1, actor
    ) == (None, None)
    assert db_session.query(InventoryTransaction).count() == 0


def test_record_invalid_quantity_writes_nothing(db_session, stocked_item):
    actor = _actor(db_session)

    with pytest.raises(StockTransactionError):
        record_stock_transaction(db_session, stocked_item.id, TransactionType.IN, 0, actor)

    # The service rolls back, releasing the row lock
    assert not db_session.in_transaction()

    assert db_session.query(InventoryTransaction).count() == 0
    assert db_session.query(InventoryItem).one().current_stock == 5


def test_record_failed_commit_rolls_back_both_writes(db_session, stocked_item):
    # performed_by is NOT NULL, so the commit itself fails
    nobody = SimpleNamespace(id=None)

    with pytest.raises(IntegrityError):
        record_stock_transaction(db_session, stocked_item.id, TransactionType.OUT, 2, nobody)

    assert db_session.query(InventoryTransaction).count() == 0
    assert db_session.query(InventoryItem).one().current_stock == 5
