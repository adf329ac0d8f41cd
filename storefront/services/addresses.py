# storefront/services/addresses.py
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.errors import NotAuthenticated, NotFound, InvalidRequest
from storefront.models.address import Address
from storefront.models.order import Order
from storefront.utils.transactions import rollback_and_raise


def _ensure_user(user_id):
    if not user_id:
        raise NotAuthenticated("User not authenticated")


def _unset_default(db: Session, user_id: str, keep_id: Optional[int] = None):
    # Only one default address per user
    query = db.query(Address).filter(Address.user_id == user_id, Address.is_default.is_(True))
    if keep_id is not None:
        query = query.filter(Address.id != keep_id)
    query.update({Address.is_default: False}, synchronize_session=False)


def list_addresses(db: Session, user_id: str) -> List[Address]:
    _ensure_user(user_id)
    return (
        db.query(Address)
        .filter(Address.user_id == user_id)
        .order_by(Address.is_default.desc(), Address.id)
        .all()
    )


def get_address(db: Session, user_id: str, address_id: int) -> Optional[Address]:
    _ensure_user(user_id)
    return db.query(Address).filter(Address.id == address_id, Address.user_id == user_id).first()


def create_address(db: Session, user_id: str, data: dict) -> Address:
    _ensure_user(user_id)
    if data.get("is_default"):
        _unset_default(db, user_id)
    address = Address(**data, user_id=user_id)
    db.add(address)
    db.commit()
    db.refresh(address)
    return address


def update_address(db: Session, user_id: str, address_id: int, data: dict) -> Address:
    address = get_address(db, user_id, address_id)
    if not address:
        raise NotFound("Address not found")

    try:
        if data.get("is_default"):
            _unset_default(db, user_id, keep_id=address.id)
        for field, value in data.items():
            setattr(address, field, value)
        db.commit()
    except SQLAlchemyError as exc:
        rollback_and_raise(db, "Address update", exc)

    db.refresh(address)
    return address


def delete_address(db: Session, user_id: str, address_id: int) -> None:
    address = get_address(db, user_id, address_id)
    if not address:
        raise NotFound("Address not found")
    if db.query(Order.id).filter(Order.address_id == address_id).first():
        raise InvalidRequest("Address is used by existing orders")

    db.delete(address)
    db.commit()
