# storefront/populate_db.py
"""Seeds a development database with demo profiles and a small catalog."""
import random
from datetime import date, timedelta
from decimal import Decimal

from storefront.database import SessionLocal, init_db
from storefront.models.cart import Cart, CartItem
from storefront.models.donation import ProductDonation
from storefront.models.order import Order, OrderItem, OrderHistory
from storefront.models.product import Product
from storefront.models.saved import SavedProduct
from storefront.models.tracking import ProductEvent, LogisticsTracking
from storefront.models.users import Profile

# Configuration
DEMO_PROFILES = [
    {"id": "demo-admin", "email": "admin@example.com", "name": "Demo Admin", "role": "admin"},
    {"id": "demo-seller", "email": "seller@example.com", "name": "Demo Seller", "role": "seller"},
    {"id": "demo-logistics", "email": "logistics@example.com", "name": "Demo Courier", "role": "logistics"},
    {"id": "demo-buyer", "email": "buyer@example.com", "name": "Demo Buyer", "role": "buyer"},
]

DEMO_PRODUCTS = [
    {"name": "Premium Headphones", "price": "159.99", "category": "electronics", "perishable": False,
     "priority": "medium", "company": "AudioTech", "quantity": 25,
     "description": "Wireless over-ear headphones with 30 hours of battery life."},
    {"name": "Organic Apples", "price": "5.99", "category": "food", "perishable": True,
     "priority": "high", "company": "FreshFarms", "quantity": 100,
     "description": "Locally grown Honeycrisp apples."},
    {"name": "Fantasy Novel", "price": "12.99", "category": "books", "perishable": False,
     "priority": "low", "company": "BookHouse Publishers", "quantity": 50,
     "description": "A 423 page hardcover adventure."},
    {"name": "Denim Jacket", "price": "69.99", "category": "clothing", "perishable": False,
     "priority": "medium", "company": "FashionTrends", "quantity": 15,
     "description": "Blue cotton denim jacket, size M."},
]
# End Configuration


def load_demo_data(session):
    """Inserts the demo profiles and catalog; returns the created products."""
    for data in DEMO_PROFILES:
        if not session.query(Profile).filter(Profile.id == data["id"]).first():
            session.add(Profile(**data))
    session.flush()

    products = []
    for data in DEMO_PRODUCTS:
        product = Product(
            **{**data, "price": Decimal(data["price"])},
            image=f"https://picsum.photos/seed/{data['name'].split()[0].lower()}/300/300",
            in_stock=data["quantity"] > 0,
            rating=round(random.uniform(3.5, 5.0), 1),
            seller_id="demo-seller",
        )
        if data["perishable"]:
            product.expiry_date = date.today() + timedelta(days=14)
        session.add(product)
        products.append(product)

    session.commit()
    print(f"Inserted {len(products)} demo products.")
    return products


def populate_database(session=None):
    """Clears catalog and order data, then loads the demo set. Profiles are preserved."""
    own_session = session is None
    if own_session:
        init_db()
        session = SessionLocal()
    try:
        for model in (LogisticsTracking, OrderHistory, OrderItem, Order, CartItem, Cart,
                      SavedProduct, ProductEvent, ProductDonation, Product):
            session.query(model).delete()
        session.commit()
        return load_demo_data(session)
    finally:
        if own_session:
            session.close()


if __name__ == "__main__":
    populate_database()
