"""Tests for booking admission rules and pricing."""

from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from nakanostay.domain.booking_request import (
    BookingCandidate,
    BookingLine,
    PricedLine,
    admit,
    check_rooms,
    compute_total,
    validate_candidate,
)
from nakanostay.domain.booking_state import BookingStatus

TODAY = date(2024, 6, 1)
NOW = datetime(2024, 6, 1, 14, 0, tzinfo=UTC)


@dataclass
class RoomStub:
    id: int
    price_per_night: Decimal
    is_available: bool = True


@dataclass
class StayStub:
    id: int
    status: str
    check_in: date
    check_out: date


def make_candidate(**overrides) -> BookingCandidate:
    values = dict(
        guest_name="Ana Torres",
        guest_dni="1710034065",
        guest_email="ana@example.com",
        check_in=date(2024, 6, 13),
        check_out=date(2024, 6, 15),
        details=(BookingLine(room_id=1, guests=2),),
        guest_phone="0991234567",
    )
    values.update(overrides)
    return BookingCandidate(**values)


def codes(violations) -> list[str]:
    return [v.code for v in violations]


class TestValidateCandidate:
    def test_valid_candidate(self):
        assert validate_candidate(make_candidate(), TODAY) == []

    def test_check_in_today_is_allowed(self):
        candidate = make_candidate(check_in=TODAY, check_out=date(2024, 6, 2))
        assert validate_candidate(candidate, TODAY) == []

    def test_every_violation_is_reported(self):
        candidate = make_candidate(
            guest_name="  ",
            guest_email="not-an-email",
            guest_dni="1710034066",
            guest_phone="12345",
            check_in=date(2024, 5, 30),
            check_out=date(2024, 5, 30),
            details=(),
        )
        assert codes(validate_candidate(candidate, TODAY)) == [
            "blank",
            "invalid_email",
            "checksum_mismatch",
            "invalid_phone",
            "check_in_in_past",
            "check_out_not_after_check_in",
            "no_rooms",
        ]

    def test_identity_rejection_reason_is_the_code(self):
        violations = validate_candidate(make_candidate(guest_dni="2510034065"), TODAY)
        assert violations[0].field == "guest_dni"
        assert violations[0].code == "bad_province"

    def test_blank_email(self):
        violations = validate_candidate(make_candidate(guest_email=""), TODAY)
        assert [(v.field, v.code) for v in violations] == [("guest_email", "blank")]

    @pytest.mark.parametrize(
        "email", ["ana@hotel..ec", "ana..b@hotel.ec", ".ana@hotel.ec", "ana@-hotel.ec"]
    )
    def test_malformed_email(self, email):
        violations = validate_candidate(make_candidate(guest_email=email), TODAY)
        assert [(v.field, v.code) for v in violations] == [("guest_email", "invalid_email")]

    def test_phone_is_optional(self):
        assert validate_candidate(make_candidate(guest_phone=None), TODAY) == []

    def test_guest_counts(self):
        candidate = make_candidate(
            details=(BookingLine(1, 0), BookingLine(2, 11), BookingLine(3, 10))
        )
        violations = validate_candidate(candidate, TODAY, max_guests=10)
        assert [(v.field, v.code) for v in violations] == [
            ("details[0].guests", "guests_below_minimum"),
            ("details[1].guests", "guests_above_maximum"),
        ]

    def test_duplicate_room(self):
        candidate = make_candidate(details=(BookingLine(1, 1), BookingLine(1, 2)))
        violations = validate_candidate(candidate, TODAY)
        assert [(v.field, v.code) for v in violations] == [
            ("details[1].room_id", "duplicate_room")
        ]

    def test_violation_as_dict(self):
        violation = validate_candidate(make_candidate(guest_name=""), TODAY)[0]
        assert violation.as_dict() == {
            "field": "guest_name",
            "code": "blank",
            "message": "Guest name is required",
        }


class TestCheckRooms:
    def test_overlap_names_first_clash_date(self):
        rooms = {1: RoomStub(1, Decimal("50.00"))}
        stays = {1: [StayStub(7, "CONFIRMED", date(2024, 6, 10), date(2024, 6, 13))]}
        candidate = make_candidate(check_in=date(2024, 6, 12), check_out=date(2024, 6, 15))

        violations = check_rooms(candidate, rooms, stays)

        assert codes(violations) == ["dates_overlap"]
        assert violations[0].field == "details[0].room_id"
        assert "2024-06-12" in violations[0].message

    def test_back_to_back_is_free(self):
        rooms = {1: RoomStub(1, Decimal("50.00"))}
        stays = {1: [StayStub(7, "CONFIRMED", date(2024, 6, 10), date(2024, 6, 13))]}
        assert check_rooms(make_candidate(), rooms, stays) == []

    def test_switched_off_room(self):
        rooms = {1: RoomStub(1, Decimal("50.00"), is_available=False)}
        assert codes(check_rooms(make_candidate(), rooms, {})) == ["room_unavailable"]

    def test_each_room_is_checked(self):
        rooms = {1: RoomStub(1, Decimal("50.00")), 2: RoomStub(2, Decimal("80.00"))}
        stays = {2: [StayStub(7, "PENDING", date(2024, 6, 14), date(2024, 6, 20))]}
        candidate = make_candidate(details=(BookingLine(1, 1), BookingLine(2, 1)))

        violations = check_rooms(candidate, rooms, stays)

        assert [(v.field, v.code) for v in violations] == [
            ("details[1].room_id", "dates_overlap")
        ]


class TestPricing:
    def test_total_is_price_times_nights_per_room(self):
        lines = [
            PricedLine(1, 2, Decimal("50.00")),
            PricedLine(2, 1, Decimal("80.50")),
        ]
        assert compute_total(lines, 3) == Decimal("391.50")

    def test_total_rounds_half_up(self):
        assert compute_total([PricedLine(1, 1, Decimal("33.335"))], 1) == Decimal("33.34")

    def test_admit_builds_pending_booking(self):
        rooms = {1: RoomStub(1, Decimal("50.00"))}
        admitted = admit(make_candidate(), rooms, booking_code="NKS-ABC234", now=NOW)

        assert admitted.status is BookingStatus.PENDING
        assert admitted.booking_code == "NKS-ABC234"
        assert admitted.booking_date == NOW
        assert admitted.total == Decimal("100.00")
        assert admitted.details[0].price_at_booking == Decimal("50.00")

    def test_price_is_snapshotted(self):
        room = RoomStub(1, Decimal("50.00"))
        admitted = admit(make_candidate(), {1: room}, booking_code="NKS-ABC234", now=NOW)

        room.price_per_night = Decimal("75.00")

        assert admitted.details[0].price_at_booking == Decimal("50.00")
        assert admitted.total == Decimal("100.00")

    def test_admit_trims_guest_fields(self):
        candidate = replace(
            make_candidate(), guest_name="  Ana Torres ", guest_email=" ana@example.com "
        )
        admitted = admit(candidate, {1: RoomStub(1, Decimal("50"))}, "NKS-ABC234", NOW)
        assert admitted.guest_name == "Ana Torres"
        assert admitted.guest_email == "ana@example.com"
