"""Dashboard figures, fetched in parallel.

A failed request only zeroes the figures that depend on it; the others are
still shown.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from helpers import Page, gather


def _count(page: Page) -> int:
    return page.total or len(page.items)


@dataclass
class LibraryStats:
    total_books: int = 0
    total_members: int = 0
    active_loans: int = 0
    overdue_loans: int = 0
    failed: List[str] = field(default_factory=list)


@dataclass
class HotelStats:
    total_guests: int = 0
    available_rooms: int = 0
    total_rooms: int = 0
    open_bookings: int = 0
    failed: List[str] = field(default_factory=list)


def library_stats(library) -> LibraryStats:
    results, errors = gather({
        "books": lambda: library.books.list(1, 1),
        "members": lambda: library.members.list(1, 1),
        "loans": lambda: library.loans.list(1, 1000),
    })

    stats = LibraryStats(failed=sorted(errors))
    if "books" in results:
        stats.total_books = _count(results["books"])
    if "members" in results:
        stats.total_members = _count(results["members"])
    if "loans" in results:
        loans = results["loans"].items
        stats.active_loans = sum(1 for loan in loans if loan.returned_at is None)
        stats.overdue_loans = sum(1 for loan in loans if loan.is_overdue())
    return stats


def hotel_stats(hotel) -> HotelStats:
    results, errors = gather({
        "guests": lambda: hotel.guests.list(1, 1),
        "rooms": lambda: hotel.rooms.list(1, 1000),
        "bookings": lambda: hotel.bookings.list(1, 1000),
    })

    stats = HotelStats(failed=sorted(errors))
    if "guests" in results:
        stats.total_guests = _count(results["guests"])
    if "rooms" in results:
        rooms = results["rooms"].items
        stats.total_rooms = _count(results["rooms"])
        stats.available_rooms = sum(1 for room in rooms if room.status == "available")
    if "bookings" in results:
        stats.open_bookings = sum(1 for booking in results["bookings"].items if booking.is_open)
    return stats
