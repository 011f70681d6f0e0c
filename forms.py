from datetime import date, timedelta

from flask import request
from flask_wtf import FlaskForm
from wtforms import (
    DateField,
    FloatField,
    HiddenField,
    IntegerField,
    SelectField,
    SelectMultipleField,
    StringField,
    SubmitField,
    TextAreaField,
)
from wtforms.validators import Optional
from wtforms.widgets import CheckboxInput, ListWidget

from models import BOOKING_STATUSES, ROOM_AMENITIES, ROOM_STATUSES, ROOM_TYPES
from validation import (
    validate_book,
    validate_booking,
    validate_guest,
    validate_loan,
    validate_member,
    validate_room,
)


def _iso(value):
    return value.isoformat() if value else None


def _choices(values):
    return [(v, v.replace("-", " ").title()) for v in values]


class ResourceForm(FlaskForm):
    """Base form: field checks come from the pure helpers in ``validation``."""

    record_id = HiddenField()
    submit = SubmitField("Save")

    checks = None
    checked_fields = ()

    def field_values(self):
        values = {}
        for name in self.checked_fields:
            field = self[name]
            value = field.data
            if value is None and field.raw_data:
                value = field.raw_data[0]
            values[name] = value
        return values

    def validate(self, extra_validators=None):
        ok = super().validate(extra_validators=extra_validators)
        errors = type(self).checks(self.field_values())
        for name, message in errors.items():
            self[name].errors = [message]
        return ok and not errors

    def payload(self):
        raise NotImplementedError

    def claim_api_error(self, error):
        """Attach an API error to a field; return True if it was claimed."""
        return False


class BookForm(ResourceForm):
    isbn = StringField("ISBN", render_kw={"placeholder": "Enter ISBN (e.g., 978-0140449136)"})
    title = StringField("Title", render_kw={"placeholder": "Enter book title"})
    author = StringField("Author", render_kw={"placeholder": "Enter author name"})
    copies = IntegerField("Copies", default=1, render_kw={"min": 0})

    checks = staticmethod(validate_book)
    checked_fields = ("isbn", "title", "author", "copies")

    def payload(self):
        return {
            "isbn": self.isbn.data.strip(),
            "title": self.title.data.strip(),
            "author": self.author.data.strip(),
            "copies": self.copies.data,
        }


class MemberForm(ResourceForm):
    name = StringField("Name", render_kw={"placeholder": "Enter full name"})
    email = StringField("Email", render_kw={"placeholder": "Enter email address"})

    checks = staticmethod(validate_member)
    checked_fields = ("name", "email")

    def payload(self):
        return {"name": self.name.data.strip(), "email": self.email.data.strip()}

    def claim_api_error(self, error):
        if error.status_code == 400 and error.message and "Email" in error.message:
            self.email.errors = [error.message]
            return True
        return False


class LoanForm(ResourceForm):
    member_id = SelectField("Member", choices=[], validate_choice=False)
    book_id = SelectField("Book", choices=[], validate_choice=False)
    loaned_at = DateField("Loan Date", default=date.today)
    due_at = DateField("Due Date", default=lambda: date.today() + timedelta(days=7))
    returned_at = DateField("Return Date", validators=[Optional()])

    checks = staticmethod(validate_loan)
    checked_fields = ("member_id", "book_id", "loaned_at", "due_at")

    def set_options(self, members, books, current_book_id=None):
        self.member_id.choices = [("", "Select a member")] + [
            (m.id, f"{m.name} ({m.email})") for m in members
        ]
        # only books with copies left, plus the one already on loan
        self.book_id.choices = [("", "Select a book")] + [
            (b.id, f"{b.title} by {b.author} ({b.copies} copies)")
            for b in books
            if b.copies > 0 or b.id == current_book_id
        ]

    def payload(self):
        data = {
            "memberId": self.member_id.data,
            "bookId": self.book_id.data,
            "loanedAt": _iso(self.loaned_at.data),
            "dueAt": _iso(self.due_at.data),
        }
        if self.returned_at.data:
            data["returnedAt"] = _iso(self.returned_at.data)
        return data


class GuestForm(ResourceForm):
    name = StringField("Full Name", render_kw={"placeholder": "Enter guest name"})
    email = StringField("Email", render_kw={"placeholder": "Enter email address"})
    phone = StringField("Phone", render_kw={"placeholder": "Enter phone number"})
    address = StringField("Address", render_kw={"placeholder": "Enter address"})

    checks = staticmethod(validate_guest)
    checked_fields = ("name", "email", "phone", "address")

    def payload(self):
        return {name: (self[name].data or "").strip() for name in self.checked_fields}


class RoomForm(ResourceForm):
    number = StringField("Room Number", render_kw={"placeholder": "Enter room number"})
    type = SelectField("Type", choices=_choices(ROOM_TYPES), default="single")
    price = FloatField("Price per Night ($)", render_kw={"min": 0, "step": "0.01"})
    capacity = IntegerField("Capacity (Guests)", render_kw={"min": 1})
    status = SelectField("Status", choices=_choices(ROOM_STATUSES), default="available")
    amenities = SelectMultipleField(
        "Amenities",
        choices=[(a, a) for a in ROOM_AMENITIES],
        widget=ListWidget(prefix_label=False),
        option_widget=CheckboxInput(),
    )

    checks = staticmethod(validate_room)
    checked_fields = ("number", "price", "capacity")

    def payload(self):
        return {
            "number": self.number.data.strip(),
            "type": self.type.data,
            "price": self.price.data,
            "capacity": self.capacity.data,
            "status": self.status.data,
            "amenities": list(self.amenities.data or []),
        }


class BookingForm(ResourceForm):
    guest_id = SelectField("Guest", choices=[], validate_choice=False)
    room_id = SelectField("Room", choices=[], validate_choice=False)
    check_in = DateField("Check-in Date")
    check_out = DateField("Check-out Date")
    status = SelectField("Status", choices=_choices(BOOKING_STATUSES), default="pending")
    total_price = FloatField("Total Price ($)", render_kw={"min": 0, "step": "0.01"})
    notes = TextAreaField("Notes", render_kw={"rows": 3})

    checks = staticmethod(validate_booking)
    checked_fields = ("guest_id", "room_id", "check_in", "check_out", "total_price")

    def set_options(self, guests, rooms):
        self.guest_id.choices = [("", "Select a guest")] + [(g.id, f"{g.name} ({g.email})") for g in guests]
        self.room_id.choices = [("", "Select a room")] + [
            (r.id, f"Room {r.number} - {r.type} (${r.price:g}/night)") for r in rooms
        ]

    def payload(self):
        return {
            "guestId": self.guest_id.data,
            "roomId": self.room_id.data,
            "checkIn": _iso(self.check_in.data),
            "checkOut": _iso(self.check_out.data),
            "status": self.status.data,
            "totalPrice": self.total_price.data,
            "notes": (self.notes.data or "").strip(),
        }


class ConfirmForm(FlaskForm):
    confirm = HiddenField(default="yes")
    submit = SubmitField("Confirm")

    @property
    def confirmed(self):
        # the default only renders the field, it has to come back in the post
        return self.validate_on_submit() and request.form.get(self.confirm.name) == "yes"
