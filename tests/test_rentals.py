from datetime import timedelta

from app.products.models import ProductCategory
from app.rentals.models import Rental, RentalItem, RentalModification
from tests.conftest import make_product


def create_rental(client, headers, items, customer_name="Familia Rojas"):
    response = client.post("/rentals/", headers=headers, json={
        "customer_name": customer_name,
        "items": items,
    })
    assert response.status_code == 201, response.text
    return response.json()


def items_sum(db, rental_id):
    db.expire_all()
    return sum(
        i.quantity * i.unit_price
        for i in db.query(RentalItem).filter(RentalItem.rental_id == rental_id)
    )


def test_rental_lifecycle_chair_then_umbrella(client, db, operator_headers, chair, umbrella):
    rental = create_rental(client, operator_headers, [
        {"product_id": chair.id, "quantity": 2, "unit_price": 5000},
    ])
    assert rental["status"] == "ACTIVE"
    assert rental["total_amount"] == 10000
    assert rental["operator_username"] == "operator"
    assert rental["items"][0]["subtotal"] == 10000
    assert rental["items"][0]["product_name"] == "Silla de Playa"

    response = client.put(f"/rentals/{rental['id']}/add-items", headers=operator_headers, json={
        "items": [{"product_id": umbrella.id, "quantity": 1, "unit_price": 10000}],
    })
    assert response.status_code == 200
    assert response.json()["total_amount"] == 20000
    assert len(response.json()["items"]) == 2

    response = client.post(f"/rentals/{rental['id']}/close", headers=operator_headers)
    assert response.status_code == 200
    closed = response.json()
    assert closed["status"] == "CLOSED"
    assert closed["end_time"] is not None

    response = client.put(f"/rentals/{rental['id']}/add-items", headers=operator_headers, json={
        "items": [{"product_id": umbrella.id, "quantity": 1, "unit_price": 10000}],
    })
    assert response.status_code == 400
    assert items_sum(db, rental["id"]) == 20000


def test_total_matches_items_after_every_change(client, db, operator_headers, chair, umbrella):
    rental = create_rental(client, operator_headers, [
        {"product_id": chair.id, "quantity": 3, "unit_price": 4999.5},
        {"product_id": umbrella.id, "quantity": 1, "unit_price": 10000},
    ])
    assert rental["total_amount"] == items_sum(db, rental["id"])

    chair_item = next(i for i in rental["items"] if i["product_id"] == chair.id)
    response = client.put(f"/rentals/{rental['id']}/modify", headers=operator_headers, json={
        "items_to_add": [{"product_id": chair.id, "quantity": 1, "unit_price": 5000}],
        "items_to_remove": [chair_item["id"]],
    })
    assert response.status_code == 200
    body = response.json()
    assert body["total_amount"] == 15000
    assert body["total_amount"] == items_sum(db, rental["id"])

    db.expire_all()
    stored = db.query(Rental).filter(Rental.id == rental["id"]).one()
    assert stored.total_amount == 15000


def test_modify_records_history(client, operator_headers, chair, umbrella):
    rental = create_rental(client, operator_headers, [
        {"product_id": chair.id, "quantity": 2, "unit_price": 5000},
    ])
    client.put(f"/rentals/{rental['id']}/modify", headers=operator_headers, json={
        "items_to_add": [{"product_id": umbrella.id, "quantity": 1, "unit_price": 10000}],
    })

    response = client.get(f"/rentals/{rental['id']}/modifications", headers=operator_headers)
    assert response.status_code == 200
    history = response.json()
    assert len(history) == 1
    assert history[0]["items_added"] == 1
    assert history[0]["items_removed"] == 0
    assert history[0]["previous_total"] == 10000
    assert history[0]["new_total"] == 20000
    assert history[0]["username"] == "operator"


def test_modify_rejects_foreign_item_and_empty_rental(client, operator_headers, chair):
    first = create_rental(client, operator_headers, [
        {"product_id": chair.id, "quantity": 1, "unit_price": 5000},
    ])
    second = create_rental(client, operator_headers, [
        {"product_id": chair.id, "quantity": 1, "unit_price": 5000},
    ])

    response = client.put(f"/rentals/{first['id']}/modify", headers=operator_headers, json={
        "items_to_remove": [second["items"][0]["id"]],
    })
    assert response.status_code == 400

    response = client.put(f"/rentals/{first['id']}/modify", headers=operator_headers, json={
        "items_to_remove": [first["items"][0]["id"]],
    })
    assert response.status_code == 400


def test_update_rental_replaces_items(client, db, operator_headers, chair, umbrella):
    rental = create_rental(client, operator_headers, [
        {"product_id": chair.id, "quantity": 2, "unit_price": 5000},
    ])

    response = client.put(f"/rentals/{rental['id']}", headers=operator_headers, json={
        "customer_name": "Familia Soto",
        "items": [{"product_id": umbrella.id, "quantity": 2, "unit_price": 10000}],
    })
    assert response.status_code == 200
    body = response.json()
    assert body["customer_name"] == "Familia Soto"
    assert body["total_amount"] == 20000
    assert [i["product_id"] for i in body["items"]] == [umbrella.id]
    assert items_sum(db, rental["id"]) == 20000

    db.expire_all()
    assert db.query(RentalModification).filter(
        RentalModification.rental_id == rental["id"]
    ).count() == 1


def test_create_rental_validation(client, operator_headers, chair, ice_cream):
    response = client.post("/rentals/", headers=operator_headers, json={
        "customer_name": "", "items": [],
    })
    assert response.status_code == 400

    response = client.post("/rentals/", headers=operator_headers, json={
        "customer_name": "X",
        "items": [{"product_id": chair.id, "quantity": 0, "unit_price": 5000}],
    })
    assert response.status_code == 400

    # vendor products cannot be rented
    response = client.post("/rentals/", headers=operator_headers, json={
        "customer_name": "X",
        "items": [{"product_id": ice_cream.id, "quantity": 1, "unit_price": 100}],
    })
    assert response.status_code == 400


def test_create_rental_with_inactive_product_is_rejected(client, db, company, operator_headers):
    old_tent = make_product(db, company, "Carpa Vieja", 1000, ProductCategory.RENTAL, is_active=False)
    response = client.post("/rentals/", headers=operator_headers, json={
        "customer_name": "X",
        "items": [{"product_id": old_tent.id, "quantity": 1, "unit_price": 1000}],
    })
    assert response.status_code == 400


def test_create_rental_is_atomic(client, db, operator_headers, chair):
    response = client.post("/rentals/", headers=operator_headers, json={
        "customer_name": "X",
        "items": [
            {"product_id": chair.id, "quantity": 1, "unit_price": 5000},
            {"product_id": 99999, "quantity": 1, "unit_price": 5000},
        ],
    })
    assert response.status_code == 404

    db.expire_all()
    assert db.query(Rental).count() == 0
    assert db.query(RentalItem).count() == 0


def test_void_rental(client, operator_headers, chair):
    rental = create_rental(client, operator_headers, [
        {"product_id": chair.id, "quantity": 1, "unit_price": 5000},
    ])

    response = client.delete(f"/rentals/{rental['id']}", headers=operator_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "VOIDED"

    assert client.delete(f"/rentals/{rental['id']}", headers=operator_headers).status_code == 400
    assert client.post(f"/rentals/{rental['id']}/close", headers=operator_headers).status_code == 400


def test_closed_rental_cannot_be_voided_or_closed_again(client, operator_headers, chair):
    rental = create_rental(client, operator_headers, [
        {"product_id": chair.id, "quantity": 1, "unit_price": 5000},
    ])
    client.post(f"/rentals/{rental['id']}/close", headers=operator_headers)

    assert client.post(f"/rentals/{rental['id']}/close", headers=operator_headers).status_code == 400
    assert client.delete(f"/rentals/{rental['id']}", headers=operator_headers).status_code == 400


def test_list_rentals_filters_by_status(client, operator_headers, chair):
    first = create_rental(client, operator_headers, [
        {"product_id": chair.id, "quantity": 1, "unit_price": 5000},
    ])
    create_rental(client, operator_headers, [
        {"product_id": chair.id, "quantity": 1, "unit_price": 5000},
    ])
    client.post(f"/rentals/{first['id']}/close", headers=operator_headers)

    everything = client.get("/rentals/", headers=operator_headers).json()
    assert everything["count"] == 2

    closed = client.get("/rentals/?status=CLOSED", headers=operator_headers).json()
    assert closed["count"] == 1
    assert closed["rentals"][0]["id"] == first["id"]


def test_rentals_are_scoped_by_company(client, operator_headers, other_headers, chair):
    rental = create_rental(client, operator_headers, [
        {"product_id": chair.id, "quantity": 1, "unit_price": 5000},
    ])

    assert client.get("/rentals/", headers=other_headers).json()["count"] == 0
    assert client.get(f"/rentals/{rental['id']}", headers=other_headers).status_code == 404
    assert client.post(f"/rentals/{rental['id']}/close", headers=other_headers).status_code == 404

    # another company's products are not visible either
    response = client.post("/rentals/", headers=other_headers, json={
        "customer_name": "X",
        "items": [{"product_id": chair.id, "quantity": 1, "unit_price": 5000}],
    })
    assert response.status_code == 404


def test_rental_stats(client, db, operator_headers, chair):
    first = create_rental(client, operator_headers, [
        {"product_id": chair.id, "quantity": 2, "unit_price": 5000},
    ])
    create_rental(client, operator_headers, [
        {"product_id": chair.id, "quantity": 1, "unit_price": 5000},
    ])
    old = create_rental(client, operator_headers, [
        {"product_id": chair.id, "quantity": 1, "unit_price": 5000},
    ])
    client.post(f"/rentals/{first['id']}/close", headers=operator_headers)
    client.post(f"/rentals/{old['id']}/close", headers=operator_headers)

    # closed two days ago: outside today's revenue
    stored = db.query(Rental).filter(Rental.id == old["id"]).one()
    stored.created_at = stored.created_at - timedelta(days=2)
    db.commit()

    stats = client.get("/rentals/stats", headers=operator_headers).json()
    assert stats == {"active_rentals": 1, "today_rentals": 2, "today_revenue": 10000}
