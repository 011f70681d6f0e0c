"""Records mirroring the documents served by the library and hotel APIs.

The backend is the only owner of these documents.  The dataclasses here are
read from API payloads (``from_api``) and only add display helpers; forms
are populated straight from them with ``Form(obj=record)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

ROOM_TYPES = ["single", "double", "deluxe", "suite"]
ROOM_STATUSES = ["available", "occupied", "maintenance"]
ROOM_AMENITIES = ["WiFi", "TV", "Mini Bar", "Jacuzzi", "Balcony", "Kitchen"]
BOOKING_STATUSES = ["pending", "confirmed", "checked-in", "completed", "cancelled"]
CLOSED_BOOKING_STATUSES = {"completed", "cancelled"}


def record_id(doc: Any) -> Optional[str]:
    if isinstance(doc, dict):
        value = doc.get("_id", doc.get("id"))
        return str(value) if value is not None else None
    if doc in (None, ""):
        return None
    return str(doc)


def parse_date(value: Any) -> Optional[date]:
    """Return the calendar date of an ISO string, ``date`` or ``datetime``."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _number(value, cast=int, default=0):
    try:
        return cast(value)
    except (TypeError, ValueError):
        return default


@dataclass
class Book:
    id: Optional[str]
    isbn: str = ""
    title: str = ""
    author: str = ""
    copies: int = 0

    @classmethod
    def from_api(cls, doc: Dict[str, Any]) -> "Book":
        return cls(
            id=record_id(doc),
            isbn=doc.get("isbn") or "",
            title=doc.get("title") or "",
            author=doc.get("author") or "",
            copies=_number(doc.get("copies")),
        )

    @property
    def available(self) -> bool:
        return self.copies > 0

    @property
    def availability(self) -> str:
        return "Available" if self.available else "Out of Stock"


@dataclass
class Member:
    id: Optional[str]
    name: str = ""
    email: str = ""
    joined_at: Optional[date] = None

    @classmethod
    def from_api(cls, doc: Dict[str, Any]) -> "Member":
        return cls(
            id=record_id(doc),
            name=doc.get("name") or "",
            email=doc.get("email") or "",
            joined_at=parse_date(doc.get("joinedAt")),
        )


@dataclass
class Loan:
    id: Optional[str]
    member_id: Optional[str] = None
    book_id: Optional[str] = None
    loaned_at: Optional[date] = None
    due_at: Optional[date] = None
    returned_at: Optional[date] = None
    # populated references, when the backend expands them
    member: Optional[Member] = None
    book: Optional[Book] = None

    @classmethod
    def from_api(cls, doc: Dict[str, Any]) -> "Loan":
        member_ref = doc.get("memberId")
        book_ref = doc.get("bookId")
        return cls(
            id=record_id(doc),
            member_id=record_id(member_ref),
            book_id=record_id(book_ref),
            loaned_at=parse_date(doc.get("loanedAt")),
            due_at=parse_date(doc.get("dueAt")),
            returned_at=parse_date(doc.get("returnedAt")),
            member=Member.from_api(member_ref) if isinstance(member_ref, dict) else None,
            book=Book.from_api(book_ref) if isinstance(book_ref, dict) else None,
        )

    def is_overdue(self, today: Optional[date] = None) -> bool:
        if self.returned_at is not None or self.due_at is None:
            return False
        return self.due_at < (today or date.today())

    @property
    def status(self) -> str:
        if self.returned_at is not None:
            return "Returned"
        if self.is_overdue():
            return "Overdue"
        return "Active"

    @property
    def short_id(self) -> str:
        return self.id[-6:] if self.id else "N/A"

    @property
    def book_title(self) -> str:
        return self.book.title if self.book and self.book.title else "—"

    @property
    def member_name(self) -> str:
        return self.member.name if self.member and self.member.name else "—"


@dataclass
class Guest:
    id: Optional[str]
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""

    @classmethod
    def from_api(cls, doc: Dict[str, Any]) -> "Guest":
        return cls(
            id=record_id(doc),
            name=doc.get("name") or "",
            email=doc.get("email") or "",
            phone=doc.get("phone") or "",
            address=doc.get("address") or "",
        )


@dataclass
class Room:
    id: Optional[str]
    number: str = ""
    type: str = "single"
    price: float = 0.0
    capacity: int = 0
    status: str = "available"
    amenities: List[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, doc: Dict[str, Any]) -> "Room":
        return cls(
            id=record_id(doc),
            number=str(doc.get("number") or ""),
            type=doc.get("type") or "single",
            price=_number(doc.get("price"), float, 0.0),
            capacity=_number(doc.get("capacity")),
            status=doc.get("status") or "available",
            amenities=list(doc.get("amenities") or []),
        )

    @property
    def label(self) -> str:
        return f"Room {self.number}"


@dataclass
class Booking:
    id: Optional[str]
    guest_id: Optional[str] = None
    room_id: Optional[str] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    status: str = "pending"
    total_price: float = 0.0
    notes: str = ""
    guest: Optional[Guest] = None
    room: Optional[Room] = None

    @classmethod
    def from_api(cls, doc: Dict[str, Any]) -> "Booking":
        guest_ref = doc.get("guestId")
        room_ref = doc.get("roomId")
        return cls(
            id=record_id(doc),
            guest_id=record_id(guest_ref),
            room_id=record_id(room_ref),
            check_in=parse_date(doc.get("checkIn")),
            check_out=parse_date(doc.get("checkOut")),
            status=doc.get("status") or "pending",
            total_price=_number(doc.get("totalPrice"), float, 0.0),
            notes=doc.get("notes") or "",
            guest=Guest.from_api(guest_ref) if isinstance(guest_ref, dict) else None,
            room=Room.from_api(room_ref) if isinstance(room_ref, dict) else None,
        )

    @property
    def is_open(self) -> bool:
        return self.status not in CLOSED_BOOKING_STATUSES

    def resolve(self, guests: List[Guest], rooms: List[Room]) -> None:
        """Fill unpopulated guest/room references from fetched lists."""
        if self.guest is None:
            self.guest = next((g for g in guests if g.id == self.guest_id), None)
        if self.room is None:
            self.room = next((r for r in rooms if r.id == self.room_id), None)

    @property
    def guest_name(self) -> str:
        return self.guest.name if self.guest and self.guest.name else "Unknown Guest"

    @property
    def room_label(self) -> str:
        return self.room.label if self.room and self.room.number else "Unknown Room"

    @property
    def nights(self) -> int:
        if self.check_in and self.check_out:
            return max((self.check_out - self.check_in).days, 0)
        return 0
