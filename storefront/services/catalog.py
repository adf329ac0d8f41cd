# storefront/services/catalog.py
"""Product catalog: public reads, seller-scoped writes and inventory changes.

Stock is only ever changed through :func:`decrement_stock` and
:func:`restock`. Both issue a single conditional UPDATE so two concurrent
callers cannot overwrite each other's result.
"""
import logging
from typing import List, Optional

from sqlalchemy import or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.errors import NotFound, PermissionDenied, InvalidRequest, InsufficientInventory
from storefront.models.product import Product
from storefront.models.cart import CartItem
from storefront.models.order import OrderItem
from storefront.models.saved import SavedProduct
from storefront.models.donation import ProductDonation
from storefront.models.tracking import ProductEvent
from storefront.utils.transactions import rollback_and_raise

logger = logging.getLogger(__name__)

products_table = Product.__table__


def list_products(
    db: Session,
    category: Optional[str] = None,
    q: Optional[str] = None,
    in_stock_only: bool = False,
) -> List[Product]:
    query = db.query(Product)

    # "all" is what the category picker sends for no filter
    if category and category.lower() != "all":
        query = query.filter(Product.category.ilike(category))
    if q:
        like = f"%{q}%"
        query = query.filter(
            or_(
                Product.name.ilike(like),
                Product.description.ilike(like),
                Product.company.ilike(like),
                Product.category.ilike(like),
            )
        )
    if in_stock_only:
        query = query.filter(Product.in_stock.is_(True))

    return query.order_by(Product.created_at.desc(), Product.id.desc()).all()


def list_categories(db: Session) -> List[str]:
    values = db.query(Product.category).distinct().filter(Product.category != None, Product.category != "").all()
    return sorted(v[0] for v in values)


def get_product(db: Session, product_id: int) -> Optional[Product]:
    return db.query(Product).filter(Product.id == product_id).first()


def list_seller_products(db: Session, seller_id: str) -> List[Product]:
    return (
        db.query(Product)
        .filter(Product.seller_id == seller_id)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )


def _owned_product(db: Session, seller_id: str, product_id: int) -> Product:
    product = get_product(db, product_id)
    if not product:
        raise NotFound("Product not found")
    if product.seller_id != seller_id:
        raise PermissionDenied("You can only modify your own products")
    return product


def new_product(db: Session, seller_id: str, data: dict) -> Product:
    """Add a product to the session without committing."""
    product = Product(**data, seller_id=seller_id)
    product.in_stock = (product.quantity or 0) > 0
    db.add(product)
    return product


def create_product(db: Session, seller_id: str, data: dict) -> Product:
    product = new_product(db, seller_id, data)
    db.commit()
    db.refresh(product)
    logger.info("Product %s created by seller %s", product.id, seller_id)
    return product


def update_product(db: Session, seller_id: str, product_id: int, data: dict) -> Product:
    product = _owned_product(db, seller_id, product_id)
    if data.get("quantity", 0) is None:
        raise InvalidRequest("quantity cannot be null")

    try:
        for field, value in data.items():
            setattr(product, field, value)
        if "quantity" in data:
            product.in_stock = product.quantity > 0
        db.commit()
    except SQLAlchemyError as exc:
        rollback_and_raise(db, "Product update", exc)

    db.refresh(product)
    return product


def delete_product(db: Session, seller_id: str, product_id: int) -> None:
    product = _owned_product(db, seller_id, product_id)

    referenced = db.query(OrderItem.id).filter(OrderItem.product_id == product_id).first()
    if referenced:
        raise InvalidRequest("Product is referenced by existing orders and cannot be deleted")
    donated = db.query(ProductDonation.id).filter(ProductDonation.product_id == product_id).first()
    if donated:
        raise InvalidRequest("Product has recorded donations and cannot be deleted")

    db.query(CartItem).filter(CartItem.product_id == product_id).delete(synchronize_session=False)
    db.query(SavedProduct).filter(SavedProduct.product_id == product_id).delete(synchronize_session=False)
    db.query(ProductEvent).filter(ProductEvent.product_id == product_id).delete(synchronize_session=False)
    db.delete(product)
    db.commit()
    logger.info("Product %s deleted by seller %s", product_id, seller_id)


def decrement_stock(db: Session, product_id: int, quantity: int, seller_id: Optional[str] = None) -> Product:
    """Take ``quantity`` units out of stock in one statement.

    The row is only touched when it still holds at least ``quantity`` units,
    and ``in_stock`` is recomputed in the same UPDATE. Nothing is committed:
    callers own the transaction.
    """
    if quantity < 1:
        raise InvalidRequest("Quantity must be at least 1")

    stmt = (
        update(products_table)
        .where(products_table.c.id == product_id, products_table.c.quantity >= quantity)
        .values(
            quantity=products_table.c.quantity - quantity,
            in_stock=(products_table.c.quantity - quantity) > 0,
        )
    )
    if seller_id is not None:
        stmt = stmt.where(products_table.c.seller_id == seller_id)

    result = db.execute(stmt)
    if result.rowcount == 0:
        query = db.query(Product).filter(Product.id == product_id)
        if seller_id is not None:
            query = query.filter(Product.seller_id == seller_id)
        product = query.populate_existing().first()
        if product is None:
            raise NotFound(f"Product with ID {product_id} not found")
        raise InsufficientInventory(
            f"Not enough quantity available for product {product_id}",
            product_id=product_id, requested=quantity, available=product.quantity,
        )

    return db.query(Product).filter(Product.id == product_id).populate_existing().one()


def restock(db: Session, product_id: int, quantity: int) -> Optional[Product]:
    """Put units back, e.g. when an order is cancelled. Does not commit."""
    result = db.execute(
        update(products_table)
        .where(products_table.c.id == product_id)
        .values(quantity=products_table.c.quantity + quantity, in_stock=True)
    )
    if result.rowcount == 0:
        # Product was deleted after the order was placed; nothing to return it to
        logger.warning("Cannot restock missing product %s", product_id)
        return None
    return db.query(Product).filter(Product.id == product_id).populate_existing().one()
