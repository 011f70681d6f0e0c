"""Client-side form checks.

Each ``validate_*`` takes the current field values of a form and returns a
mapping of field name to message.  Nothing here talks to the backend.
"""

import re
from datetime import datetime

from models import parse_date

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _blank(value):
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _as_int(value):
    if isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _as_float(value):
    if isinstance(value, bool):
        return None
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return None


def _positive(value):
    number = _as_float(value)
    return number is not None and number > 0


def _as_moment(value):
    """Datetimes keep their time, plain dates and ISO strings become dates."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and "T" in value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return parse_date(value)


def _after(later, earlier):
    # compare on calendar dates when either side has no time of day
    if isinstance(later, datetime) != isinstance(earlier, datetime):
        later = later.date() if isinstance(later, datetime) else later
        earlier = earlier.date() if isinstance(earlier, datetime) else earlier
    elif isinstance(later, datetime) and (later.tzinfo is None) != (earlier.tzinfo is None):
        later = later.replace(tzinfo=None)
        earlier = earlier.replace(tzinfo=None)
    return later > earlier


def validate_book(book):
    errors = {}

    isbn = book.get("isbn")
    if _blank(isbn):
        errors["isbn"] = "ISBN is required"
    elif len(str(isbn).strip()) < 10:
        errors["isbn"] = "ISBN must be at least 10 characters"

    if _blank(book.get("title")):
        errors["title"] = "Title is required"

    if _blank(book.get("author")):
        errors["author"] = "Author is required"

    copies = book.get("copies")
    if _blank(copies):
        errors["copies"] = "Number of copies is required"
    else:
        count = _as_int(copies)
        if count is None or count < 0:
            errors["copies"] = "Copies must be a non-negative number"

    return errors


def validate_member(member):
    errors = {}

    name = member.get("name")
    if _blank(name):
        errors["name"] = "Name is required"
    elif len(str(name).strip()) < 2:
        errors["name"] = "Name must be at least 2 characters"

    email = member.get("email")
    if _blank(email):
        errors["email"] = "Email is required"
    elif not EMAIL_RE.match(str(email).strip()):
        errors["email"] = "Invalid email address"

    return errors


def validate_loan(loan, now=None):
    """Check a loan; ``now`` defaults to the current local time."""
    errors = {}
    now = now or datetime.now()

    if _blank(loan.get("member_id")):
        errors["member_id"] = "Member is required"

    if _blank(loan.get("book_id")):
        errors["book_id"] = "Book is required"

    loaned_at = _as_moment(loan.get("loaned_at"))
    if loaned_at is None:
        errors["loaned_at"] = "Loan date is required"
    elif _after(loaned_at, now):
        errors["loaned_at"] = "Loan date cannot be in the future"

    due_at = _as_moment(loan.get("due_at"))
    if due_at is None:
        errors["due_at"] = "Due date is required"
    elif loaned_at is not None and not _after(due_at, loaned_at):
        errors["due_at"] = "Due date must be after loan date"

    return errors


def validate_guest(guest):
    errors = {}

    if _blank(guest.get("name")):
        errors["name"] = "Name is required"

    email = guest.get("email")
    if _blank(email):
        errors["email"] = "Email is required"
    elif not EMAIL_RE.match(str(email).strip()):
        errors["email"] = "Valid email is required"

    if _blank(guest.get("phone")):
        errors["phone"] = "Phone is required"
    if _blank(guest.get("address")):
        errors["address"] = "Address is required"

    return errors


def validate_room(room):
    errors = {}

    if _blank(room.get("number")):
        errors["number"] = "Room number is required"
    if not _positive(room.get("price")):
        errors["price"] = "Valid price is required"
    if not _positive(room.get("capacity")):
        errors["capacity"] = "Valid capacity is required"

    return errors


def validate_booking(booking):
    errors = {}

    if _blank(booking.get("guest_id")):
        errors["guest_id"] = "Guest is required"
    if _blank(booking.get("room_id")):
        errors["room_id"] = "Room is required"

    check_in = parse_date(booking.get("check_in"))
    check_out = parse_date(booking.get("check_out"))
    if check_in is None:
        errors["check_in"] = "Check-in date is required"
    if check_out is None:
        errors["check_out"] = "Check-out date is required"
    elif check_in is not None and check_in >= check_out:
        errors["check_out"] = "Check-out date must be after check-in date"

    if not _positive(booking.get("total_price")):
        errors["total_price"] = "Valid total price is required"

    return errors


def is_form_valid(errors):
    return len(errors) == 0
