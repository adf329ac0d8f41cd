# storefront/routes/cart.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.users import Profile
from storefront.schemas.cart import CartAddItem, CartUpdateItem, CartOut
from storefront.services import cart as cart_service
from storefront.utils.audit import write_log, client_ip
from storefront.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/cart", tags=["Cart"])

@router.get("", response_model=CartOut)
def get_cart(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    return cart_service.get_cart(db, current_user.id)

@router.post("/add", response_model=CartOut)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    out = cart_service.add_to_cart(db, current_user.id, payload.product_id, payload.quantity)
    write_log(
        db,
        user_id=current_user.id,
        action="CART_ADD",
        resource="cart",
        ip=client_ip(request),
        meta={"product_id": payload.product_id, "qty": payload.quantity, "total": str(out.total)},
    )
    return out

@router.put("/items/{item_id}", response_model=CartOut)
def update_cart_item(
    item_id: int,
    payload: CartUpdateItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    out = cart_service.update_quantity(db, current_user.id, item_id, payload.quantity)
    write_log(
        db,
        user_id=current_user.id,
        action="CART_UPDATE",
        resource="cart",
        ip=client_ip(request),
        meta={"item_id": item_id, "qty": payload.quantity, "total": str(out.total)},
    )
    return out

@router.delete("/items/{item_id}", response_model=CartOut)
def delete_cart_item(
    item_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    out = cart_service.remove_from_cart(db, current_user.id, item_id)
    write_log(
        db,
        user_id=current_user.id,
        action="CART_DELETE",
        resource="cart",
        ip=client_ip(request),
        meta={"item_id": item_id, "cart_items": len(out.items), "total": str(out.total)},
    )
    return out

@router.delete("", response_model=CartOut)
def clear_cart(
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    out = cart_service.clear_cart(db, current_user.id)
    write_log(db, user_id=current_user.id, action="CART_CLEAR", resource="cart", ip=client_ip(request))
    return out
