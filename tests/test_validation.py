from datetime import date, datetime, timedelta

from validation import (
    is_form_valid,
    validate_book,
    validate_booking,
    validate_guest,
    validate_loan,
    validate_member,
    validate_room,
)

NOW = datetime(2024, 6, 1, 12, 0)


def test_book_errors():
    errors = validate_book({"isbn": "123456789", "title": "", "author": "A", "copies": -1})

    assert errors == {
        "isbn": "ISBN must be at least 10 characters",
        "title": "Title is required",
        "copies": "Copies must be a non-negative number",
    }


def test_book_required_fields():
    errors = validate_book({"isbn": "  ", "title": None, "author": "", "copies": ""})
    assert errors["isbn"] == "ISBN is required"
    assert errors["author"] == "Author is required"
    assert errors["copies"] == "Number of copies is required"


def test_valid_book():
    book = {"isbn": "9780140449136", "title": "The Odyssey", "author": "Homer", "copies": 0}
    assert is_form_valid(validate_book(book))


def test_book_copies_must_be_a_number():
    assert "copies" in validate_book({"isbn": "9780140449136", "title": "T", "author": "A", "copies": "many"})


def test_member_rules():
    assert validate_member({"name": "A", "email": "a@b.co"}) == {"name": "Name must be at least 2 characters"}
    assert validate_member({"name": "Ada", "email": "not-an-email"}) == {"email": "Invalid email address"}
    assert validate_member({"name": "", "email": ""}) == {
        "name": "Name is required",
        "email": "Email is required",
    }
    assert validate_member({"name": "Ada", "email": "ada@example.com"}) == {}


def test_loan_due_date_must_follow_loan_date():
    same_day = {"member_id": "m1", "book_id": "b1", "loaned_at": "2024-05-01", "due_at": "2024-05-01"}
    earlier = dict(same_day, due_at="2024-04-20")

    assert validate_loan(same_day, now=NOW) == {"due_at": "Due date must be after loan date"}
    assert validate_loan(earlier, now=NOW) == {"due_at": "Due date must be after loan date"}


def test_loan_date_cannot_be_in_the_future():
    loan = {"member_id": "m1", "book_id": "b1", "loaned_at": "2024-06-02", "due_at": "2024-06-09"}
    assert validate_loan(loan, now=NOW) == {"loaned_at": "Loan date cannot be in the future"}


def test_loan_with_datetimes():
    loan = {
        "member_id": "m1",
        "book_id": "b1",
        "loaned_at": NOW + timedelta(minutes=5),
        "due_at": NOW + timedelta(days=7),
    }
    assert validate_loan(loan, now=NOW) == {"loaned_at": "Loan date cannot be in the future"}


def test_loan_today_is_allowed():
    loan = {"member_id": "m1", "book_id": "b1", "loaned_at": date.today(), "due_at": date.today() + timedelta(days=7)}
    assert validate_loan(loan) == {}


def test_loan_required_fields():
    assert validate_loan({}, now=NOW) == {
        "member_id": "Member is required",
        "book_id": "Book is required",
        "loaned_at": "Loan date is required",
        "due_at": "Due date is required",
    }


def test_guest_requires_everything():
    errors = validate_guest({"name": "", "email": "bad", "phone": " ", "address": ""})
    assert errors == {
        "name": "Name is required",
        "email": "Valid email is required",
        "phone": "Phone is required",
        "address": "Address is required",
    }


def test_room_rules():
    assert validate_room({"number": "101", "price": 0, "capacity": "2"}) == {"price": "Valid price is required"}
    assert validate_room({"number": "", "price": "", "capacity": -1}) == {
        "number": "Room number is required",
        "price": "Valid price is required",
        "capacity": "Valid capacity is required",
    }
    assert validate_room({"number": "101", "price": 99.5, "capacity": 2}) == {}


def test_booking_checkout_after_checkin():
    booking = {"guest_id": "g1", "room_id": "r1", "check_in": "2024-05-03", "check_out": "2024-05-03", "total_price": 100}
    assert validate_booking(booking) == {"check_out": "Check-out date must be after check-in date"}

    booking["check_out"] = date(2024, 5, 5)
    assert validate_booking(booking) == {}


def test_booking_total_price_positive():
    booking = {"guest_id": "g1", "room_id": "r1", "check_in": "2024-05-03", "check_out": "2024-05-05", "total_price": 0}
    assert validate_booking(booking) == {"total_price": "Valid total price is required"}


def test_is_form_valid():
    assert is_form_valid({})
    assert not is_form_valid({"name": "Name is required"})
