import pytest

from storefront.errors import NotFound
from storefront.models.saved import SavedProduct
from storefront.services import saved as saved_service


def test_save_is_idempotent(db, buyer, make_product):
    product = make_product()

    first = saved_service.save(db, buyer.id, product.id)
    second = saved_service.save(db, buyer.id, product.id)

    assert first.id == second.id
    assert db.query(SavedProduct).filter(SavedProduct.user_id == buyer.id).count() == 1
    assert saved_service.is_saved(db, buyer.id, product.id)


def test_save_unknown_product(db, buyer):
    with pytest.raises(NotFound):
        saved_service.save(db, buyer.id, 404)


def test_toggle_flips_state(db, buyer, make_product):
    product = make_product()

    assert saved_service.toggle(db, buyer.id, product.id) is True
    assert saved_service.is_saved(db, buyer.id, product.id)
    assert saved_service.toggle(db, buyer.id, product.id) is False
    assert not saved_service.is_saved(db, buyer.id, product.id)


def test_unsave_only_own_entries(db, buyer, make_profile, make_product):
    other = make_profile("buyer-2")
    entry = saved_service.save(db, other.id, make_product().id)

    assert saved_service.unsave(db, buyer.id, entry.id) is False
    assert saved_service.unsave(db, other.id, entry.id) is True
    assert saved_service.list_saved(db, other.id) == []


def test_list_saved_newest_first_with_product(db, buyer, make_product):
    older = make_product(name="Apples")
    newer = make_product(name="Jacket")
    saved_service.save(db, buyer.id, older.id)
    saved_service.save(db, buyer.id, newer.id)

    entries = saved_service.list_saved(db, buyer.id)
    assert [e.product.name for e in entries] == ["Jacket", "Apples"]
