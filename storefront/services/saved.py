# storefront/services/saved.py
import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from storefront.errors import NotAuthenticated, NotFound
from storefront.models.product import Product
from storefront.models.saved import SavedProduct

logger = logging.getLogger(__name__)


def _ensure_user(user_id):
    if not user_id:
        raise NotAuthenticated("User not authenticated")


def _find(db: Session, user_id: str, product_id: int):
    return db.query(SavedProduct).filter(
        SavedProduct.user_id == user_id, SavedProduct.product_id == product_id
    ).first()


def is_saved(db: Session, user_id: str, product_id: int) -> bool:
    _ensure_user(user_id)
    return _find(db, user_id, product_id) is not None


def save(db: Session, user_id: str, product_id: int) -> SavedProduct:
    """Save a product for the user; saving twice returns the existing entry."""
    _ensure_user(user_id)
    if not db.query(Product.id).filter(Product.id == product_id).first():
        raise NotFound("Product not found")

    entry = SavedProduct(user_id=user_id, product_id=product_id)
    db.add(entry)
    try:
        db.commit()
    except IntegrityError:
        # Unique (user, product) violation: already saved
        db.rollback()
        existing = _find(db, user_id, product_id)
        if existing is None:
            raise
        logger.debug("Product %s already saved by %s", product_id, user_id)
        return existing

    db.refresh(entry)
    return entry


def unsave(db: Session, user_id: str, saved_id: int) -> bool:
    _ensure_user(user_id)
    deleted = (
        db.query(SavedProduct)
        .filter(SavedProduct.id == saved_id, SavedProduct.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted > 0


def toggle(db: Session, user_id: str, product_id: int) -> bool:
    """Flip the saved state of a product and return the new state."""
    _ensure_user(user_id)
    existing = _find(db, user_id, product_id)
    if existing:
        db.delete(existing)
        db.commit()
        return False
    save(db, user_id, product_id)
    return True


def list_saved(db: Session, user_id: str) -> List[SavedProduct]:
    _ensure_user(user_id)
    return (
        db.query(SavedProduct)
        .options(joinedload(SavedProduct.product))
        .filter(SavedProduct.user_id == user_id)
        .order_by(SavedProduct.created_at.desc(), SavedProduct.id.desc())
        .all()
    )
