from datetime import datetime, timezone

from app.services.firestore_service import PARCELS
from tests.conftest import OTHER_EMAIL, USER_EMAIL, auth

PARCEL = {
    "sendarEmail": USER_EMAIL,
    "parcelName": "Box",
    "cost": 120,
    "parcelType": "document",
    "receiverName": "Bob",
    "receiverRegion": "Dhaka",
}


def seed_parcel(firestore, parcel_id, email=USER_EMAIL, status="Created", created=1):
    firestore.seed(
        PARCELS,
        {
            "sendarEmail": email,
            "parcelName": f"Parcel {parcel_id}",
            "cost": 50,
            "deliveryStatus": status,
            "trackingId": None,
            "createdAt": datetime(2025, 1, created, tzinfo=timezone.utc),
        },
        document_id=parcel_id,
    )


class TestCreateParcel:

    def test_creates_unpaid_parcel(self, client, firestore):
        response = client.post("/parcels", json=PARCEL, headers=auth("user-token"))

        assert response.status_code == 200
        parcel_id = response.json()["insertedId"]
        stored = firestore.documents(PARCELS)[parcel_id]
        assert stored["deliveryStatus"] == "Created"
        assert stored["trackingId"] is None
        assert stored["sendarEmail"] == USER_EMAIL
        assert stored["receiverName"] == "Bob"
        assert isinstance(stored["createdAt"], datetime)
        assert "_id" not in stored

    def test_requires_token(self, client):
        assert client.post("/parcels", json=PARCEL).status_code == 401

    def test_rejects_missing_cost(self, client):
        body = {key: value for key, value in PARCEL.items() if key != "cost"}
        response = client.post("/parcels", json=body, headers=auth("user-token"))
        assert response.status_code == 422


class TestListParcels:

    def test_lists_own_parcels_newest_first(self, client, firestore):
        seed_parcel(firestore, "old", created=1)
        seed_parcel(firestore, "new", created=5)
        seed_parcel(firestore, "theirs", email=OTHER_EMAIL, created=9)

        response = client.get(
            "/parcels", params={"email": USER_EMAIL}, headers=auth("user-token")
        )

        assert response.status_code == 200
        assert [p["_id"] for p in response.json()] == ["new", "old"]

    def test_filters_by_delivery_status(self, client, firestore):
        seed_parcel(firestore, "unpaid", status="Created")
        seed_parcel(firestore, "paid", status="Paid")

        response = client.get(
            "/parcels",
            params={"email": USER_EMAIL, "deliveryStatus": "Paid"},
            headers=auth("user-token"),
        )

        assert [p["_id"] for p in response.json()] == ["paid"]

    def test_rejects_other_users_email(self, client):
        response = client.get(
            "/parcels", params={"email": USER_EMAIL}, headers=auth("other-token")
        )
        assert response.status_code == 403


class TestSingleParcel:

    def test_get_parcel(self, client, firestore):
        seed_parcel(firestore, "P1")

        response = client.get("/parcels/P1", headers=auth("user-token"))

        assert response.status_code == 200
        assert response.json()["_id"] == "P1"
        assert response.json()["deliveryStatus"] == "Created"

    def test_missing_parcel_is_not_found(self, client):
        response = client.get("/parcels/nope", headers=auth("user-token"))
        assert response.status_code == 404

    def test_delete_parcel(self, client, firestore):
        seed_parcel(firestore, "P1")

        response = client.delete("/parcels/P1", headers=auth("user-token"))

        assert response.json()["deletedCount"] == 1
        assert "P1" not in firestore.documents(PARCELS)
        assert client.delete("/parcels/P1", headers=auth("user-token")).json()["deletedCount"] == 0

    def test_other_user_cannot_read_parcel(self, client, firestore):
        seed_parcel(firestore, "P1")

        response = client.get("/parcels/P1", headers=auth("other-token"))

        assert response.status_code == 403

    def test_admin_reads_any_parcel(self, client, firestore):
        seed_parcel(firestore, "P1")

        response = client.get("/parcels/P1", headers=auth("admin-token"))

        assert response.status_code == 200
        assert response.json()["sendarEmail"] == USER_EMAIL

    def test_other_user_cannot_delete_parcel(self, client, firestore):
        seed_parcel(firestore, "P1")

        response = client.delete("/parcels/P1", headers=auth("other-token"))

        assert response.status_code == 403
        assert "P1" in firestore.documents(PARCELS)

    def test_admin_deletes_any_parcel(self, client, firestore):
        seed_parcel(firestore, "P1", email=OTHER_EMAIL)

        response = client.delete("/parcels/P1", headers=auth("admin-token"))

        assert response.json()["deletedCount"] == 1
