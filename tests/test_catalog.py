import pytest

from storefront.errors import BackendError, InvalidRequest
from storefront.models.product import Product
from storefront.models.tracking import ProductEvent
from storefront.services import catalog
from storefront.services import donations as donation_service
from storefront.services import tracking as tracking_service


def _fresh(db, product):
    return db.query(Product).filter(Product.id == product.id).populate_existing().one()


def test_update_with_null_values_leaves_product_unchanged(db, seller, make_product):
    product = make_product(name="Apples", quantity=5)

    with pytest.raises(InvalidRequest):
        catalog.update_product(db, seller.id, product.id, {"quantity": None})
    with pytest.raises(BackendError):
        catalog.update_product(db, seller.id, product.id, {"name": None})

    product = _fresh(db, product)
    assert product.name == "Apples"
    assert product.quantity == 5


def test_delete_refuses_donated_products_and_drops_events(db, seller, make_product):
    donated = make_product(name="Rice", quantity=5)
    viewed = make_product(name="Bread", quantity=5)
    donation_service.donate_product(db, seller.id, donated.id, 1, "Shelter")
    tracking_service.record_view(db, viewed)

    with pytest.raises(InvalidRequest):
        catalog.delete_product(db, seller.id, donated.id)

    catalog.delete_product(db, seller.id, viewed.id)
    assert catalog.get_product(db, viewed.id) is None
    assert db.query(ProductEvent).filter(ProductEvent.product_id == viewed.id).count() == 0
