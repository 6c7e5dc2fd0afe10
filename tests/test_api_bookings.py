"""End-to-end tests for the booking endpoints."""

from conftest import OTHER_VALID_DNI, VALID_DNI, booking_payload, days_from_today

BOOKINGS = "/api/bookings"


async def create_booking(client, room_id: int, start: int, end: int, **overrides) -> dict:
    response = await client.post(
        BOOKINGS,
        json=booking_payload(room_id, days_from_today(start), days_from_today(end), **overrides),
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateBooking:
    async def test_creates_pending_booking(self, client, room):
        data = await create_booking(client, room.id, 10, 13)

        assert data["status"] == "PENDING"
        assert data["booking_code"].startswith("NKS-")
        assert data["nights"] == 3
        assert data["total"] == "150.00"
        assert data["details"] == [
            {"room_id": room.id, "guests": 2, "price_at_booking": "50.00"}
        ]
        assert data["cancelled_by"] is None

    async def test_client_status_is_ignored(self, client, room):
        data = await create_booking(client, room.id, 10, 11, status="CONFIRMED")
        assert data["status"] == "PENDING"

    async def test_overlap_is_conflict(self, client, room):
        await create_booking(client, room.id, 10, 13)

        response = await client.post(
            BOOKINGS,
            json=booking_payload(
                room.id, days_from_today(12), days_from_today(15), guest_dni=OTHER_VALID_DNI
            ),
        )

        assert response.status_code == 409
        body = response.json()
        assert body["detail"] == "The selected dates are not available"
        assert body["errors"][0]["code"] == "dates_overlap"

    async def test_back_to_back_is_accepted(self, client, room):
        await create_booking(client, room.id, 10, 13)
        data = await create_booking(client, room.id, 13, 15)
        assert data["total"] == "100.00"

    async def test_field_errors_listed_together(self, client, room):
        response = await client.post(
            BOOKINGS,
            json=booking_payload(
                room.id,
                days_from_today(-3),
                days_from_today(-3),
                guest_dni="1710034066",
                details=[{"room_id": room.id, "guests": 0}],
            ),
        )

        assert response.status_code == 422
        assert [e["code"] for e in response.json()["errors"]] == [
            "checksum_mismatch",
            "check_in_in_past",
            "check_out_not_after_check_in",
            "guests_below_minimum",
        ]

    async def test_unknown_room(self, client, room):
        response = await client.post(
            BOOKINGS, json=booking_payload(9999, days_from_today(10), days_from_today(12))
        )
        assert response.status_code == 404

    async def test_unavailable_room(self, client, room, admin_headers):
        await client.put(f"/api/rooms/{room.id}/unavailable", headers=admin_headers)

        response = await client.post(
            BOOKINGS, json=booking_payload(room.id, days_from_today(10), days_from_today(12))
        )

        assert response.status_code == 409
        assert response.json()["errors"][0]["code"] == "room_unavailable"

    async def test_price_change_does_not_touch_existing_booking(
        self, client, room, admin_headers
    ):
        data = await create_booking(client, room.id, 10, 12)

        response = await client.put(
            f"/api/rooms/{room.id}",
            json={
                "hotel_id": room.hotel_id,
                "room_number": room.room_number,
                "room_type": room.room_type,
                "price_per_night": "75.00",
            },
            headers=admin_headers,
        )
        assert response.status_code == 200

        lookup = await client.get(
            f"{BOOKINGS}/code/{data['booking_code']}", params={"dni": VALID_DNI}
        )
        assert lookup.json()["total"] == "100.00"
        assert lookup.json()["details"][0]["price_at_booking"] == "50.00"

        newer = await create_booking(client, room.id, 20, 22)
        assert newer["total"] == "150.00"


class TestGuestAccess:
    async def test_lookup_by_code_and_dni(self, client, room):
        data = await create_booking(client, room.id, 10, 12)

        response = await client.get(
            f"{BOOKINGS}/code/{data['booking_code'].lower()}", params={"dni": VALID_DNI}
        )

        assert response.status_code == 200
        assert response.json()["id"] == data["id"]

    async def test_lookup_failures_look_the_same(self, client, room):
        data = await create_booking(client, room.id, 10, 12)

        wrong_dni = await client.get(
            f"{BOOKINGS}/code/{data['booking_code']}", params={"dni": OTHER_VALID_DNI}
        )
        wrong_code = await client.get(f"{BOOKINGS}/code/NKS-ZZZZZZ", params={"dni": VALID_DNI})

        assert wrong_dni.status_code == wrong_code.status_code == 404
        assert wrong_dni.json() == wrong_code.json()

    async def test_guest_cancel(self, client, room):
        data = await create_booking(client, room.id, 10, 12)

        response = await client.put(
            f"{BOOKINGS}/code/{data['booking_code']}/cancel", params={"dni": VALID_DNI}
        )

        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"
        assert response.json()["cancelled_by"] == "guest"
        assert response.json()["cancelled_at"] is not None

    async def test_cancel_twice_is_invalid_transition(self, client, room):
        data = await create_booking(client, room.id, 10, 12)
        url = f"{BOOKINGS}/code/{data['booking_code']}/cancel"
        await client.put(url, params={"dni": VALID_DNI})

        response = await client.put(url, params={"dni": VALID_DNI})

        assert response.status_code == 409
        assert response.json()["current_status"] == "CANCELLED"
        assert response.json()["target_status"] == "CANCELLED"

    async def test_cancelled_dates_can_be_rebooked(self, client, room):
        data = await create_booking(client, room.id, 10, 12)
        await client.put(
            f"{BOOKINGS}/code/{data['booking_code']}/cancel", params={"dni": VALID_DNI}
        )

        rebooked = await create_booking(client, room.id, 10, 12, guest_dni=OTHER_VALID_DNI)
        assert rebooked["status"] == "PENDING"

    async def test_guest_cannot_confirm(self, client, room):
        data = await create_booking(client, room.id, 10, 12)
        response = await client.put(
            f"{BOOKINGS}/code/{data['booking_code']}/confirm", params={"dni": VALID_DNI}
        )
        assert response.status_code == 401


class TestAdminLifecycle:
    async def test_confirm_and_complete(self, client, room, admin_headers):
        data = await create_booking(client, room.id, 10, 12)
        code = data["booking_code"]

        confirmed = await client.put(
            f"{BOOKINGS}/code/{code}/confirm", params={"dni": VALID_DNI}, headers=admin_headers
        )
        assert confirmed.status_code == 200
        assert confirmed.json()["status"] == "CONFIRMED"
        assert confirmed.json()["confirmed_at"] is not None

        completed = await client.put(
            f"{BOOKINGS}/code/{code}/complete", params={"dni": VALID_DNI}, headers=admin_headers
        )
        assert completed.status_code == 200
        assert completed.json()["status"] == "COMPLETED"

    async def test_complete_pending_is_rejected(self, client, room, admin_headers):
        data = await create_booking(client, room.id, 10, 12)

        response = await client.put(
            f"{BOOKINGS}/code/{data['booking_code']}/complete",
            params={"dni": VALID_DNI},
            headers=admin_headers,
        )

        assert response.status_code == 409
        assert response.json()["current_status"] == "PENDING"
        assert response.json()["target_status"] == "COMPLETED"

    async def test_admin_cancel_is_recorded(self, client, room, admin_headers):
        data = await create_booking(client, room.id, 10, 12)

        response = await client.put(
            f"{BOOKINGS}/code/{data['booking_code']}/cancel",
            params={"dni": VALID_DNI},
            headers=admin_headers,
        )

        assert response.json()["cancelled_by"] == "admin"

    async def test_list_filters(self, client, room, admin_headers):
        first = await create_booking(client, room.id, 10, 12)
        second = await create_booking(
            client, room.id, 20, 22, guest_dni=OTHER_VALID_DNI, guest_name="Luis Mora"
        )
        await client.put(
            f"{BOOKINGS}/code/{second['booking_code']}/confirm",
            params={"dni": OTHER_VALID_DNI},
            headers=admin_headers,
        )

        everything = await client.get(BOOKINGS, headers=admin_headers)
        confirmed = await client.get(BOOKINGS, params={"status": "CONFIRMED"}, headers=admin_headers)
        by_name = await client.get(BOOKINGS, params={"q": "torres"}, headers=admin_headers)

        assert {b["id"] for b in everything.json()} == {first["id"], second["id"]}
        assert [b["id"] for b in confirmed.json()] == [second["id"]]
        assert [b["id"] for b in by_name.json()] == [first["id"]]

    async def test_list_requires_admin(self, client, room):
        response = await client.get(BOOKINGS)
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    async def test_get_and_delete(self, client, room, admin_headers):
        data = await create_booking(client, room.id, 10, 12)

        fetched = await client.get(f"{BOOKINGS}/{data['id']}", headers=admin_headers)
        assert fetched.json()["booking_code"] == data["booking_code"]

        deleted = await client.delete(f"{BOOKINGS}/delete/{data['id']}", headers=admin_headers)
        assert deleted.status_code == 204

        missing = await client.get(f"{BOOKINGS}/{data['id']}", headers=admin_headers)
        assert missing.status_code == 404
