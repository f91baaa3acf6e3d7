# clinic/services/inventory.py
"""
Stock-transaction rules for inventory items.

A transaction is either an intake (`in`), a withdrawal (`out`) or an
`adjustment` that sets the absolute stock after a physical count.
"""

from sqlalchemy.orm import Session
from typing import Optional, Tuple
import logging

from clinic.config import settings
from clinic.models.all_models import InventoryItem, InventoryTransaction, Profile, TransactionType

logger = logging.getLogger(__name__)

# Upper bound of the Integer stock columns
MAX_STOCK = 2_147_483_647

class StockTransactionError(ValueError):
    """Raised when a transaction request cannot be applied to an item."""

def validate_quantity(transaction_type: TransactionType, quantity: int) -> None:
    if transaction_type == TransactionType.ADJUSTMENT:
        if quantity < 0:
            raise StockTransactionError("Adjustment quantity cannot be negative")
    elif quantity < 1:
        raise StockTransactionError("Quantity must be at least 1")

def compute_new_stock(
    current_stock: int,
    transaction_type: TransactionType,
    quantity: int,
    reject_overdraw: Optional[bool] = None
) -> int:
    """
    Return the item's stock after applying a transaction.

    `out` clamps at zero unless overdraw rejection is enabled, in which case
    withdrawing more than is on hand raises StockTransactionError.
    """
    transaction_type = TransactionType(transaction_type)
    validate_quantity(transaction_type, quantity)
    if reject_overdraw is None:
        reject_overdraw = settings.REJECT_STOCK_OVERDRAW

    if transaction_type == TransactionType.IN:
        if current_stock + quantity > MAX_STOCK:
            raise StockTransactionError(f"Stock cannot exceed {MAX_STOCK}")
        return current_stock + quantity
    if transaction_type == TransactionType.OUT:
        if reject_overdraw and quantity > current_stock:
            raise StockTransactionError(
                f"Cannot withdraw {quantity}; only {current_stock} in stock"
            )
        return max(0, current_stock - quantity)
    return quantity

def record_stock_transaction(
    db: Session,
    item_id,
    transaction_type: TransactionType,
    quantity: int,
    actor: Profile,
    reason: Optional[str] = None
) -> Tuple[InventoryItem, InventoryTransaction]:
    """
    Write the transaction log entry and the item's new stock in one commit.

    The item row is locked for the duration where the backend supports
    SELECT ... FOR UPDATE. Any failure rolls both writes back.
    """
    item = (
        db.query(InventoryItem)
        .filter(InventoryItem.id == item_id)
        .with_for_update()
        .first()
    )
    if item is None:
        return None, None

    previous_stock = item.current_stock
    try:
        new_stock = compute_new_stock(item.current_stock, transaction_type, quantity)

        transaction = InventoryTransaction(
            item_id=item.id,
            transaction_type=transaction_type,
            quantity=quantity,
            reason=reason or None,
            performed_by=actor.id
        )
        item.current_stock = new_stock

        db.add(transaction)
        db.commit()
    except Exception:
        # Releases the row lock too
        db.rollback()
        raise

    db.refresh(item)
    db.refresh(transaction)
    logger.info(
        "Stock %s on item %s by %s: %s -> %s (qty %s)",
        TransactionType(transaction_type).value, item.id, actor.id, previous_stock, new_stock, quantity
    )
    return item, transaction
