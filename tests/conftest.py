from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.database import Base, get_db, init_db
from storefront.main import app
from storefront.models.address import Address
from storefront.models.product import Product
from storefront.models.users import Profile
from storefront.utils.tokenJWT import create_access_token


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    # No context manager: the lifespan would create tables on the real database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_profile(db):
    def _make(user_id, role="buyer", **kwargs):
        profile = Profile(
            id=user_id,
            email=kwargs.pop("email", f"{user_id}@example.com"),
            name=kwargs.pop("name", user_id.title()),
            role=role,
            **kwargs,
        )
        db.add(profile)
        db.commit()
        return profile
    return _make


@pytest.fixture
def buyer(make_profile):
    return make_profile("buyer-1")


@pytest.fixture
def seller(make_profile):
    return make_profile("seller-1", role="seller")


@pytest.fixture
def make_product(db, seller):
    def _make(name="Organic Apples", price="5.99", quantity=10, seller_id=None, **kwargs):
        product = Product(
            name=name,
            description=kwargs.pop("description", ""),
            price=Decimal(price),
            category=kwargs.pop("category", "food"),
            image=kwargs.pop("image", ""),
            company=kwargs.pop("company", "FreshFarms"),
            quantity=quantity,
            in_stock=quantity > 0,
            seller_id=seller_id or seller.id,
            **kwargs,
        )
        db.add(product)
        db.commit()
        return product
    return _make


@pytest.fixture
def make_address(db):
    def _make(user_id, **kwargs):
        address = Address(
            user_id=user_id,
            name=kwargs.pop("name", "Home"),
            line1=kwargs.pop("line1", "1 Market Street"),
            city=kwargs.pop("city", "Springfield"),
            state=kwargs.pop("state", "IL"),
            postal_code=kwargs.pop("postal_code", "62701"),
            country=kwargs.pop("country", "US"),
            **kwargs,
        )
        db.add(address)
        db.commit()
        return address
    return _make


@pytest.fixture
def auth_headers():
    def _headers(profile):
        token = create_access_token({"sub": profile.id, "role": profile.role})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def donation_form():
    def _form(**overrides):
        data = {
            "organization_name": "Food Bank North",
            "organization_type": "food-bank",
            "contact_name": "Sam Lee",
            "contact_email": "sam@foodbank.org",
            "contact_phone": "555-0100",
            "food_types": ["fruit", "grains"],
            "is_vegetarian": True,
            "is_perishable": True,
            "quantity_required": "50 kg",
            "urgency_level": "high",
            "usage_purpose": "Weekly meal program",
            "delivery_preference": "pickup",
            "storage_capability": ["refrigerated"],
            "service_area": "North district",
            "address": "12 Harbor Road",
            "operating_hours": "9-17",
            "description": "Fresh produce for families",
            "people_served": "200",
        }
        data.update(overrides)
        return data
    return _form


@pytest.fixture
def two_sessions(tmp_path):
    """Two independent sessions on one file database, for interleaving writers."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'shared.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    first, second = Session(), Session()
    try:
        yield first, second
    finally:
        first.close()
        second.close()
        engine.dispose()
