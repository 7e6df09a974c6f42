"""Tests for the equipment, rental and payment routes."""

from datetime import datetime, timedelta

import pytest


def iso_day(offset: int) -> str:
    day = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=offset)
    return day.isoformat()


@pytest.fixture
def parties(register):
    owner, owner_headers = register("owner@example.com", address="1 Maple St")
    renter, renter_headers = register("renter@example.com", address="9 Oak Ave")
    other, other_headers = register("other@example.com", address="5 Elm Rd")
    return {
        "owner": (owner, owner_headers),
        "renter": (renter, renter_headers),
        "other": (other, other_headers),
    }


def create_equipment(client, api, headers, **overrides):
    payload = {
        "name": "Self-propelled mower",
        "make": "Toro",
        "category": "mower",
        "fuel_type": "gas",
        "power_type": "push",
        "daily_rental_price": "30.00",
        "visibility": "school_district",
    }
    payload.update(overrides)
    response = client.post(f"{api}/equipment", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def request_rental(client, api, headers, equipment_id, start, end):
    return client.post(
        f"{api}/equipment/{equipment_id}/rent",
        json={"start_date": iso_day(start), "end_date": iso_day(end)},
        headers=headers,
    )


class TestEquipmentCrud:
    def test_create_and_list(self, client, api, parties):
        _, owner_headers = parties["owner"]
        _, renter_headers = parties["renter"]
        _, other_headers = parties["other"]
        equipment = create_equipment(client, api, owner_headers)

        assert equipment["is_available"] is True
        assert equipment["elementary_school_district_name"] == "Minneapolis Public School District"

        assert len(client.get(f"{api}/equipment").json()) == 1
        response = client.get(f"{api}/equipment", params={"filter": "true"}, headers=renter_headers)
        assert [e["id"] for e in response.json()] == [equipment["id"]]
        response = client.get(f"{api}/equipment", params={"filter": "true"}, headers=other_headers)
        assert response.json() == []

    def test_price_must_be_positive(self, client, api, parties):
        _, owner_headers = parties["owner"]
        response = client.post(
            f"{api}/equipment",
            json={"name": "Edger", "category": "edger", "daily_rental_price": "0", "visibility": "zip_code"},
            headers=owner_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "daily rental price must be greater than 0"

    def test_unavailable_equipment_hidden_by_default(self, client, api, parties):
        _, owner_headers = parties["owner"]
        equipment = create_equipment(client, api, owner_headers)

        response = client.put(
            f"{api}/equipment/{equipment['id']}", json={"is_available": False}, headers=owner_headers
        )
        assert response.status_code == 200
        assert client.get(f"{api}/equipment").json() == []
        response = client.get(f"{api}/equipment", params={"is_available": "false"})
        assert len(response.json()) == 1

    def test_list_filters(self, client, api, parties):
        _, owner_headers = parties["owner"]
        create_equipment(client, api, owner_headers, name="Cheap edger", category="edger", daily_rental_price="10")
        create_equipment(client, api, owner_headers, name="Big mower", daily_rental_price="50")

        response = client.get(f"{api}/equipment", params={"category": "edger"})
        assert [e["name"] for e in response.json()] == ["Cheap edger"]
        response = client.get(f"{api}/equipment", params={"max_price": "20"})
        assert [e["name"] for e in response.json()] == ["Cheap edger"]

    def test_my_equipment_and_ownership(self, client, api, parties):
        _, owner_headers = parties["owner"]
        _, renter_headers = parties["renter"]
        equipment = create_equipment(client, api, owner_headers)

        response = client.get(f"{api}/equipment/my", headers=owner_headers)
        assert [e["id"] for e in response.json()] == [equipment["id"]]
        assert client.get(f"{api}/equipment/my", headers=renter_headers).json() == []

        response = client.delete(f"{api}/equipment/{equipment['id']}", headers=renter_headers)
        assert response.status_code == 403


class TestRentalRoutes:
    def test_rental_price_and_validation(self, client, api, parties):
        _, owner_headers = parties["owner"]
        _, renter_headers = parties["renter"]
        equipment = create_equipment(client, api, owner_headers)

        response = request_rental(client, api, renter_headers, equipment["id"], 2, 4)
        assert response.status_code == 201
        assert response.json()["total_price"] == 90.0
        assert response.json()["status"] == "requested"

        response = request_rental(client, api, renter_headers, equipment["id"], 5, 3)
        assert response.status_code == 400
        assert response.json()["detail"] == "end date cannot be before start date"

        response = request_rental(client, api, renter_headers, equipment["id"], -2, 1)
        assert response.status_code == 400
        assert response.json()["detail"] == "start date cannot be in the past"

        response = request_rental(client, api, owner_headers, equipment["id"], 2, 3)
        assert response.status_code == 403
        assert response.json()["detail"] == "cannot rent your own equipment"

    def test_overlapping_requests_after_approval(self, client, api, parties):
        _, owner_headers = parties["owner"]
        _, renter_headers = parties["renter"]
        _, other_headers = parties["other"]
        equipment = create_equipment(client, api, owner_headers)

        first = request_rental(client, api, renter_headers, equipment["id"], 1, 3).json()
        response = client.put(
            f"{api}/equipment/{equipment['id']}/rentals/{first['id']}",
            json={"status": "approved"},
            headers=owner_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "approved"

        response = request_rental(client, api, other_headers, equipment["id"], 2, 4)
        assert response.status_code == 400
        assert response.json()["detail"] == "equipment is not available for the selected dates"

        response = request_rental(client, api, other_headers, equipment["id"], 4, 6)
        assert response.status_code == 201

    def test_owner_may_only_approve_or_cancel(self, client, api, parties):
        _, owner_headers = parties["owner"]
        _, renter_headers = parties["renter"]
        equipment = create_equipment(client, api, owner_headers)
        rental = request_rental(client, api, renter_headers, equipment["id"], 1, 2).json()
        url = f"{api}/equipment/{equipment['id']}/rentals/{rental['id']}"

        response = client.put(url, json={"status": "active"}, headers=owner_headers)
        assert response.status_code == 400

        response = client.put(url, json={"status": "approved"}, headers=renter_headers)
        assert response.status_code == 403

        response = client.put(url, json={"status": "cancelled"}, headers=owner_headers)
        assert response.status_code == 200
        response = client.put(url, json={"status": "approved"}, headers=owner_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "can only approve requested rentals"

    def test_rentals_listing_is_owner_only(self, client, api, parties):
        _, owner_headers = parties["owner"]
        _, renter_headers = parties["renter"]
        equipment = create_equipment(client, api, owner_headers)
        request_rental(client, api, renter_headers, equipment["id"], 1, 2)

        response = client.get(f"{api}/equipment/{equipment['id']}/rentals", headers=owner_headers)
        assert len(response.json()) == 1
        assert response.json()[0]["renter"]["first_name"] == "Test"
        response = client.get(f"{api}/equipment/{equipment['id']}/rentals", headers=renter_headers)
        assert response.status_code == 403


class TestRentalPaymentFlow:
    def test_pay_activate_complete(self, client, api, parties, payment_processor, verify_insurance):
        _, owner_headers = parties["owner"]
        renter, renter_headers = parties["renter"]
        equipment = create_equipment(client, api, owner_headers)
        rental = request_rental(client, api, renter_headers, equipment["id"], 1, 3).json()

        # Payment needs an approved rental
        response = client.post(
            f"{api}/payments/create-intent",
            json={"amount": "90.00", "type": "equipment_rental", "related_id": rental["id"]},
            headers=renter_headers,
        )
        assert response.status_code == 400

        client.put(
            f"{api}/equipment/{equipment['id']}/rentals/{rental['id']}",
            json={"status": "approved"},
            headers=owner_headers,
        )
        response = client.post(
            f"{api}/payments/create-intent",
            json={"amount": "90.00", "type": "equipment_rental", "related_id": rental["id"]},
            headers=renter_headers,
        )
        assert response.status_code == 201
        intent = response.json()
        assert intent["client_secret"]
        payment_id = intent["payment"]["id"]

        payment_processor.set_status(intent["payment_intent_id"], "succeeded")
        response = client.post(f"{api}/payments/confirm", json={"payment_id": payment_id}, headers=renter_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["payment"]["status"] == "succeeded"
        assert body["rental_activated"] is True

        # Equipment with an active rental cannot be deleted
        response = client.delete(f"{api}/equipment/{equipment['id']}", headers=owner_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "cannot delete equipment with active rentals"

        complete_url = f"{api}/equipment/rentals/{rental['id']}/complete"
        response = client.post(complete_url, json={"return_notes": "Returned clean"}, headers=renter_headers)
        assert response.status_code == 403

        verify_insurance(renter["id"], renter_headers)
        response = client.post(complete_url, json={"return_notes": "Returned clean"}, headers=renter_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert response.json()["return_notes"] == "Returned clean"

        response = client.delete(f"{api}/equipment/{equipment['id']}", headers=owner_headers)
        assert response.status_code == 200

    def test_history_and_lookup(self, client, api, parties):
        _, owner_headers = parties["owner"]
        _, renter_headers = parties["renter"]
        equipment = create_equipment(client, api, owner_headers)
        rental = request_rental(client, api, renter_headers, equipment["id"], 1, 1).json()
        client.put(
            f"{api}/equipment/{equipment['id']}/rentals/{rental['id']}",
            json={"status": "approved"},
            headers=owner_headers,
        )
        intent = client.post(
            f"{api}/payments/create-intent",
            json={"amount": "30.00", "type": "equipment_rental", "related_id": rental["id"]},
            headers=renter_headers,
        ).json()
        payment_id = intent["payment"]["id"]

        response = client.get(f"{api}/payments/history", headers=renter_headers)
        assert [p["id"] for p in response.json()] == [payment_id]
        assert client.get(f"{api}/payments/history", headers=owner_headers).json() == []

        assert client.get(f"{api}/payments/{payment_id}", headers=renter_headers).status_code == 200
        assert client.get(f"{api}/payments/{payment_id}", headers=owner_headers).status_code == 404

    def test_invalid_payment_type(self, client, api, parties):
        _, renter_headers = parties["renter"]
        response = client.post(
            f"{api}/payments/create-intent",
            json={"amount": "5.00", "type": "tip", "related_id": 1},
            headers=renter_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "invalid payment type"
