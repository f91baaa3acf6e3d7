# clinic/routes/inventory/router.py

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import IntegrityError
from typing import Optional
import uuid
import logging

from clinic.config import settings
from clinic.database import get_db
from clinic.models.all_models import (
    InventoryCategory, InventoryItem, InventoryTransaction
)
from clinic.routes.inventory.schemas import (
    CategoryCreate, CategoryResponse, ItemCreate, ItemResponse,
    TransactionCreate, TransactionResponse, TransactionResult, InventoryOverview
)
from clinic.services.inventory import StockTransactionError, record_stock_transaction
from clinic.services.views import (
    search_items, low_stock_items, expiring_soon_items, stock_status
)
from clinic.utils.auth import AuthContext, require_staff, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inventory", tags=["inventory"])

def _item_response(item: InventoryItem) -> ItemResponse:
    return ItemResponse.model_validate(item).model_copy(update={"stock_status": stock_status(item)})

def _transaction_response(transaction: InventoryTransaction) -> TransactionResponse:
    return TransactionResponse(
        id=transaction.id,
        item_id=transaction.item_id,
        transaction_type=transaction.transaction_type,
        quantity=transaction.quantity,
        reason=transaction.reason,
        performed_by=transaction.performed_by,
        created_at=transaction.created_at,
        item_name=transaction.item.name if transaction.item else None,
        performed_by_name=transaction.performer.full_name if transaction.performer else None
    )

@router.get("", response_model=InventoryOverview)
async def get_inventory(
    search: Optional[str] = Query(None, description="Search by item, category or supplier"),
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff)
):
    """
    Items with their category, all categories, the most recent transactions
    and the low-stock / expiring-soon alert lists.
    """
    try:
        items = db.query(InventoryItem).options(
            joinedload(InventoryItem.category)
        ).order_by(InventoryItem.name).all()

        categories = db.query(InventoryCategory).order_by(InventoryCategory.name).all()

        transactions = db.query(InventoryTransaction).options(
            joinedload(InventoryTransaction.item),
            joinedload(InventoryTransaction.performer)
        ).order_by(
            InventoryTransaction.created_at.desc()
        ).limit(settings.RECENT_TRANSACTIONS_LIMIT).all()
    except Exception as e:
        logger.exception("Error fetching inventory")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error retrieving inventory: {str(e)}"
        )

    return InventoryOverview(
        items=[_item_response(item) for item in search_items(items, search)],
        categories=[CategoryResponse.model_validate(c) for c in categories],
        transactions=[
            _transaction_response(t) for t in transactions
            if t.item is not None and t.performer is not None
        ],
        low_stock=[_item_response(item) for item in low_stock_items(items)],
        expiring_soon=[
            _item_response(item)
            for item in expiring_soon_items(items, days=settings.EXPIRY_WARNING_DAYS)
        ],
        search=search
    )

@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin)
):
    """
    Create an inventory category (admin only)
    """
    try:
        category = InventoryCategory(**category_data.model_dump())
        db.add(category)
        db.commit()
        db.refresh(category)
        return category
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A category with this name already exists"
        )
    except Exception as e:
        db.rollback()
        logger.exception("Error creating inventory category")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creating category: {str(e)}"
        )

@router.post("/items", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    item_data: ItemCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff)
):
    try:
        category = db.query(InventoryCategory).filter(
            InventoryCategory.id == item_data.category_id
        ).first()
        if not category:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Category not found"
            )

        item = InventoryItem(**item_data.model_dump())
        db.add(item)
        db.commit()
        db.refresh(item)
        return _item_response(item)

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Error creating inventory item")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creating item: {str(e)}"
        )

@router.post(
    "/items/{item_id}/transactions",
    response_model=TransactionResult,
    status_code=status.HTTP_201_CREATED
)
async def create_transaction(
    item_id: uuid.UUID,
    transaction_data: TransactionCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff)
):
    """
    Record an in / out / adjustment transaction and update the item's stock.
    """
    try:
        item, transaction = record_stock_transaction(
            db,
            item_id=item_id,
            transaction_type=transaction_data.transaction_type,
            quantity=transaction_data.quantity,
            actor=ctx.profile,
            reason=transaction_data.reason
        )
        if item is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found"
            )

        return TransactionResult(
            message="Transaction recorded",
            item=_item_response(item),
            transaction=_transaction_response(transaction)
        )

    except HTTPException:
        raise
    except StockTransactionError as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        db.rollback()
        logger.exception("Error recording transaction for item %s", item_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error recording transaction: {str(e)}"
        )
