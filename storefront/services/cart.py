# storefront/services/cart.py
import logging
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from storefront.errors import NotAuthenticated, NotFound, InvalidRequest, InsufficientInventory
from storefront.models.cart import Cart, CartItem
from storefront.models.product import Product
from storefront.schemas.cart import CartOut, CartItemOut
from storefront.schemas.product import ProductSnapshot
from storefront.services.tracking import record_event
from storefront.utils.transactions import rollback_and_raise

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _ensure_user(user_id):
    if not user_id:
        raise NotAuthenticated("User not authenticated")


def get_open_cart(db: Session, user_id: str) -> Cart:
    # Retrieve the user's cart or create it on first access
    cart = db.query(Cart).filter(Cart.user_id == user_id).first()
    if not cart:
        cart = Cart(user_id=user_id)
        db.add(cart)
        db.commit()
        db.refresh(cart)
    return cart


def cart_to_out(cart: Cart) -> CartOut:
    items_out = []
    total = Decimal("0")

    for it in cart.items:
        # Cart lines are always valued at the current catalog price
        line_total = (Decimal(it.product.price) * it.quantity).quantize(CENT)
        total += line_total
        items_out.append(CartItemOut(
            id=it.id,
            product_id=it.product_id,
            quantity=it.quantity,
            line_total=line_total,
            product=ProductSnapshot.model_validate(it.product),
        ))

    return CartOut(
        items=items_out,
        total=total.quantize(CENT),
        item_count=sum(it.quantity for it in items_out),
    )


def get_cart(db: Session, user_id: str) -> CartOut:
    _ensure_user(user_id)
    cart = get_open_cart(db, user_id)
    cart = (
        db.query(Cart)
        .options(joinedload(Cart.items).joinedload(CartItem.product))
        .filter(Cart.id == cart.id)
        .populate_existing()
        .one()
    )
    return cart_to_out(cart)


def _touch(cart: Cart):
    # Bump updated_at even when only child rows changed
    cart.updated_at = func.now()


def _owned_item(db: Session, cart: Cart, item_id: int) -> CartItem:
    item = db.query(CartItem).filter(CartItem.id == item_id, CartItem.cart_id == cart.id).first()
    if not item:
        raise NotFound("Cart item not found")
    return item


def _merge_line(db: Session, cart: Cart, product_id: int, quantity: int) -> None:
    item = db.query(CartItem).filter(
        CartItem.cart_id == cart.id, CartItem.product_id == product_id
    ).first()
    if item:
        # Incremented in SQL so a concurrent add to the same line is not lost
        item.quantity = CartItem.quantity + quantity
    else:
        db.add(CartItem(cart_id=cart.id, product_id=product_id, quantity=quantity))


def add_to_cart(db: Session, user_id: str, product_id: int, quantity: int = 1) -> CartOut:
    _ensure_user(user_id)
    if quantity < 1:
        raise InvalidRequest("Quantity must be at least 1")

    cart = get_open_cart(db, user_id)

    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFound("Product not found")
    if not product.in_stock:
        raise InsufficientInventory("Product is out of stock", product_id=product_id,
                                    requested=quantity, available=product.quantity)

    for attempt in range(2):
        _merge_line(db, cart, product_id, quantity)
        record_event(db, product, "cart", user_id=user_id, quantity=quantity)
        _touch(cart)
        try:
            db.commit()
            break
        except IntegrityError as exc:
            # A concurrent add created the line first; the retry increments it
            if attempt:
                rollback_and_raise(db, "Cart update", exc)
            db.rollback()

    logger.info("Cart %s: added product %s x%s", cart.id, product_id, quantity)
    return get_cart(db, user_id)


def update_quantity(db: Session, user_id: str, item_id: int, quantity: int) -> CartOut:
    _ensure_user(user_id)
    if quantity < 1:
        return remove_from_cart(db, user_id, item_id)

    cart = get_open_cart(db, user_id)
    item = _owned_item(db, cart, item_id)
    item.quantity = quantity

    _touch(cart)
    db.commit()
    return get_cart(db, user_id)


def remove_from_cart(db: Session, user_id: str, item_id: int) -> CartOut:
    _ensure_user(user_id)
    cart = get_open_cart(db, user_id)
    item = _owned_item(db, cart, item_id)

    db.delete(item)
    _touch(cart)
    db.commit()
    return get_cart(db, user_id)


def empty_cart(db: Session, cart: Cart) -> None:
    """Delete every line of ``cart`` without committing.

    Order placement calls this so the cart is emptied in the same
    transaction that creates the order.
    """
    db.query(CartItem).filter(CartItem.cart_id == cart.id).delete(synchronize_session=False)
    _touch(cart)


def clear_cart(db: Session, user_id: str) -> CartOut:
    _ensure_user(user_id)
    cart = get_open_cart(db, user_id)
    empty_cart(db, cart)
    db.commit()
    return get_cart(db, user_id)
