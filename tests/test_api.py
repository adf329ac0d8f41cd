from storefront.models.log import Log


def test_root(client):
    assert client.get("/").json() == {"message": "Storefront API is running"}


def test_cart_requires_token(client):
    assert client.get("/cart").status_code in (401, 403)


def test_invalid_token_rejected(client):
    response = client.get("/cart", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_cart_flow(client, db, buyer, make_product, auth_headers):
    headers = auth_headers(buyer)
    product = make_product(price="10.00")

    response = client.post("/cart/add", json={"product_id": product.id, "quantity": 2}, headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["item_count"] == 2
    assert body["total"] == "20.00"
    item_id = body["items"][0]["id"]

    response = client.put(f"/cart/items/{item_id}", json={"quantity": 3}, headers=headers)
    assert response.json()["total"] == "30.00"

    response = client.delete(f"/cart/items/{item_id}", headers=headers)
    assert response.json()["items"] == []

    actions = [entry.action for entry in db.query(Log).order_by(Log.id)]
    assert actions == ["CART_ADD", "CART_UPDATE", "CART_DELETE"]


def test_domain_errors_render_as_json(client, buyer, make_product, auth_headers):
    product = make_product(quantity=0)

    response = client.post("/cart/add", json={"product_id": product.id}, headers=auth_headers(buyer))
    assert response.status_code == 409
    assert response.json()["error"] == "InsufficientInventory"

    response = client.post("/cart/add", json={"product_id": 999}, headers=auth_headers(buyer))
    assert response.status_code == 404
    assert response.json() == {"detail": "Product not found", "error": "NotFound"}


def test_checkout_and_order_views(client, buyer, seller, make_profile, make_product, make_address, auth_headers):
    headers = auth_headers(buyer)
    address = make_address(buyer.id)
    product = make_product(price="5.00", quantity=4)
    client.post("/cart/add", json={"product_id": product.id, "quantity": 2}, headers=headers)

    response = client.post("/orders", json={"address_id": address.id}, headers=headers)
    assert response.status_code == 201
    order = response.json()
    assert order["status"] == "pending"
    assert order["total"] == "10.00"
    assert client.get("/cart", headers=headers).json()["items"] == []

    assert [o["id"] for o in client.get("/orders", headers=headers).json()] == [order["id"]]
    assert client.get(f"/orders/{order['id']}", headers=auth_headers(seller)).status_code == 200

    stranger = make_profile("buyer-2")
    assert client.get(f"/orders/{order['id']}", headers=auth_headers(stranger)).status_code == 404

    seller_orders = client.get("/seller/orders", headers=auth_headers(seller)).json()
    assert [o["id"] for o in seller_orders] == [order["id"]]
    assert client.get("/seller/orders", headers=headers).status_code == 403


def test_order_status_patch_and_cancel(client, buyer, seller, make_product, make_address, auth_headers):
    headers = auth_headers(buyer)
    address = make_address(buyer.id)
    client.post("/cart/add", json={"product_id": make_product().id}, headers=headers)
    order_id = client.post("/orders", json={"address_id": address.id}, headers=headers).json()["id"]

    assert client.patch(f"/orders/{order_id}/status", json={"status": "processing"}, headers=headers).status_code == 403

    response = client.patch(f"/orders/{order_id}/status", json={"status": "processing"}, headers=auth_headers(seller))
    assert response.status_code == 200
    assert response.json()["status"] == "processing"

    response = client.patch(f"/orders/{order_id}/status", json={"status": "delivered"}, headers=auth_headers(seller))
    assert response.status_code == 403

    response = client.post(f"/orders/{order_id}/cancel", headers=headers)
    assert response.json()["status"] == "cancelled"

    response = client.post(f"/orders/{order_id}/cancel", headers=headers)
    assert response.status_code == 409
    assert response.json()["error"] == "InvalidTransition"

    history = client.get(f"/orders/{order_id}/history", headers=headers).json()
    assert [h["status"] for h in history] == ["pending", "processing", "cancelled"]


def test_products_public_and_seller_ownership(client, seller, make_profile, auth_headers):
    payload = {"name": "Organic Apples", "price": "5.99", "category": "food", "quantity": 0}

    response = client.post("/seller/products", json=payload, headers=auth_headers(seller))
    assert response.status_code == 201
    product = response.json()
    assert product["in_stock"] is False

    response = client.patch(f"/seller/products/{product['id']}", json={"quantity": 12}, headers=auth_headers(seller))
    assert response.json()["in_stock"] is True

    listing = client.get("/products", params={"category": "food"}).json()
    assert listing["total"] == 1
    assert client.get("/products/categories").json() == ["food"]
    assert client.get(f"/products/{product['id']}").json()["name"] == "Organic Apples"

    rival = make_profile("seller-2", role="seller")
    response = client.patch(f"/seller/products/{product['id']}", json={"price": "1.00"}, headers=auth_headers(rival))
    assert response.status_code == 403
    assert client.delete(f"/seller/products/{product['id']}", headers=auth_headers(rival)).status_code == 403

    assert client.delete(f"/seller/products/{product['id']}", headers=auth_headers(seller)).status_code == 204
    assert client.get(f"/products/{product['id']}").status_code == 404


def test_saved_endpoints(client, buyer, make_product, auth_headers):
    headers = auth_headers(buyer)
    product = make_product()

    first = client.post("/saved", json={"product_id": product.id}, headers=headers).json()
    second = client.post("/saved", json={"product_id": product.id}, headers=headers).json()
    assert first["id"] == second["id"]
    assert client.get(f"/saved/check/{product.id}", headers=headers).json() == {"product_id": product.id, "saved": True}

    assert client.delete(f"/saved/{first['id']}", headers=headers).status_code == 204
    assert client.delete(f"/saved/{first['id']}", headers=headers).status_code == 404

    assert client.post(f"/saved/toggle/{product.id}", headers=headers).json()["saved"] is True
    assert len(client.get("/saved", headers=headers).json()) == 1


def test_donation_request_is_public(client, donation_form, make_profile, seller, make_product, auth_headers):
    response = client.post("/donations/requests", json=donation_form())
    assert response.status_code == 201
    request_id = response.json()["id"]
    assert response.json()["status"] == "pending"
    assert response.json()["user_id"] is None

    bad = client.post("/donations/requests", json=donation_form(contact_email="not-an-email"))
    assert bad.status_code == 422

    admin = make_profile("admin-1", role="admin")
    assert client.patch(f"/donations/requests/{request_id}/status", json={"status": "approved"},
                        headers=auth_headers(seller)).status_code == 403
    response = client.patch(f"/donations/requests/{request_id}/status", json={"status": "approved"},
                            headers=auth_headers(admin))
    assert response.json()["status"] == "approved"

    listed = client.get("/donations/requests", params={"urgency": "high"}, headers=auth_headers(seller)).json()
    assert [r["id"] for r in listed] == [request_id]

    product = make_product(quantity=5)
    response = client.post(f"/donations/requests/{request_id}/accept",
                           json={"products": [{"product_id": product.id, "quantity": 2}]},
                           headers=auth_headers(seller))
    assert response.status_code == 201
    assert response.json()["products"] == [{"product_id": product.id, "quantity": 2}]
    assert client.get(f"/products/{product.id}").json()["quantity"] == 3

    fulfillments = client.get("/donations/fulfillments", headers=auth_headers(admin)).json()
    assert len(fulfillments) == 1


def test_addresses_and_dashboards(client, buyer, seller, auth_headers):
    headers = auth_headers(buyer)
    payload = {"name": "Home", "line1": "1 Market Street", "city": "Springfield",
               "state": "IL", "postal_code": "62701", "country": "US", "is_default": True}

    created = client.post("/addresses", json=payload, headers=headers)
    assert created.status_code == 201
    address_id = created.json()["id"]
    assert client.patch(f"/addresses/{address_id}", json={"city": "Shelbyville"},
                        headers=headers).json()["city"] == "Shelbyville"

    assert client.get("/me", headers=headers).json()["role"] == "buyer"
    assert client.get("/dashboard/buyer", headers=headers).json()["total_orders"] == 0
    assert client.get("/dashboard/seller", headers=headers).status_code == 403
    assert client.get("/dashboard/seller", headers=auth_headers(seller)).json()["products"] == 0

    assert client.delete(f"/addresses/{address_id}", headers=headers).status_code == 204
    assert client.get("/addresses", headers=headers).json() == []


def test_null_patch_fields_are_rejected(client, seller, buyer, make_product, make_address, auth_headers):
    product = make_product(name="Apples", quantity=5)
    url = f"/seller/products/{product.id}"

    for field in ("quantity", "name", "price", "priority"):
        response = client.patch(url, json={field: None}, headers=auth_headers(seller))
        assert response.status_code == 422, field

    response = client.patch(url, json={"expiry_date": None}, headers=auth_headers(seller))
    assert response.status_code == 200
    body = client.get(f"/products/{product.id}").json()
    assert body["name"] == "Apples"
    assert body["quantity"] == 5

    address = make_address(buyer.id)
    response = client.patch(f"/addresses/{address.id}", json={"city": None}, headers=auth_headers(buyer))
    assert response.status_code == 422
    response = client.patch(f"/addresses/{address.id}", json={"line2": None}, headers=auth_headers(buyer))
    assert response.status_code == 200


def test_direct_donation_endpoints(client, seller, buyer, make_product, auth_headers):
    headers = auth_headers(seller)
    product = make_product(price="4.00", quantity=10)

    response = client.post("/donations/products",
                           json={"product_id": product.id, "quantity": 3, "destination": "Shelter"},
                           headers=headers)
    assert response.status_code == 201
    assert response.json()["value"] == "12.00"
    assert client.get(f"/products/{product.id}").json()["quantity"] == 7

    response = client.post("/donations/products/new", headers=headers, json={
        "product": {"name": "Rice", "price": "2.00", "category": "food", "quantity": 10},
        "quantity": 4, "destination": "Food Bank North",
    })
    assert response.status_code == 201

    assert len(client.get("/donations/products", headers=headers).json()) == 2
    assert client.get("/donations/products", headers=auth_headers(buyer)).status_code == 403
    assert client.get("/dashboard/seller", headers=headers).json()["units_donated"] == 7


def test_tracking_endpoints(client, seller, buyer, make_product, auth_headers):
    product = make_product()
    client.get(f"/products/{product.id}")
    client.get(f"/products/{product.id}", headers=auth_headers(buyer))
    # The seller's own views are not counted
    client.get(f"/products/{product.id}", headers=auth_headers(seller))
    client.post("/cart/add", json={"product_id": product.id, "quantity": 2}, headers=auth_headers(buyer))

    events = client.get("/seller/tracking", headers=auth_headers(seller)).json()
    assert sorted(e["event_type"] for e in events) == ["cart", "view", "view"]
    views = client.get("/seller/tracking", params={"event_type": "view"}, headers=auth_headers(seller)).json()
    assert len(views) == 2

    summary = client.get("/seller/tracking/summary", headers=auth_headers(seller)).json()
    assert summary["totals"] == {"views": 2, "carts": 2, "purchases": 0, "donations": 0}
    assert len(client.get(f"/seller/tracking/products/{product.id}", headers=auth_headers(seller)).json()) == 3
    assert client.get("/seller/tracking", headers=auth_headers(buyer)).status_code == 403

    mine = client.get("/tracking/me", headers=auth_headers(buyer)).json()
    assert sorted(e["event_type"] for e in mine) == ["cart", "view"]


def test_order_logistics_endpoint(client, seller, buyer, make_address, make_product, auth_headers):
    headers = auth_headers(buyer)
    address = make_address(buyer.id)
    client.post("/cart/add", json={"product_id": make_product().id}, headers=headers)
    order_id = client.post("/orders", json={"address_id": address.id}, headers=headers).json()["id"]

    assert client.get(f"/orders/{order_id}/logistics", headers=headers).status_code == 404

    client.patch(f"/orders/{order_id}/status", json={"status": "ready_for_pickup"}, headers=auth_headers(seller))
    response = client.get(f"/orders/{order_id}/logistics", headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "waiting_pickup"
    assert response.json()["end_location"]["city"] == "Springfield"
