"""Resource services for the library and hotel backends.

Each service maps list / get / create / update / delete onto one REST
resource.  There is no retry or caching: an ``ApiError`` reaches the caller
as is.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from api import ApiClient, ApiError
from helpers import Page, parse_page, parse_page_lenient, unwrap_record
from models import Book, Booking, Guest, Loan, Member, Room

logger = logging.getLogger(__name__)


class ResourceService:
    def __init__(self, client: ApiClient, path: str, model, strict: bool = True):
        self.client = client
        self.path = path
        self.model = model
        self.strict = strict

    def list(self, page: int = 1, page_size: int = 10) -> Page:
        payload = self.client.get(self.path, params={"page": page, "limit": page_size})
        if self.strict:
            result = parse_page(payload, page)
        else:
            result = parse_page_lenient(payload, self.path, page)
        result.items = [self.model.from_api(doc) for doc in result.items if isinstance(doc, dict)]
        return result

    def get(self, record_id: str):
        return self.model.from_api(unwrap_record(self.client.get(f"{self.path}/{record_id}")))

    def create(self, record: Dict[str, Any]):
        logger.info("creating %s", self.path)
        return self.model.from_api(unwrap_record(self.client.post(self.path, json=record)))

    def update(self, record_id: str, record: Dict[str, Any]):
        logger.info("updating %s/%s", self.path, record_id)
        return self.model.from_api(unwrap_record(self.client.put(f"{self.path}/{record_id}", json=record)))

    def delete(self, record_id: str) -> Dict[str, Any]:
        logger.info("deleting %s/%s", self.path, record_id)
        payload = self.client.delete(f"{self.path}/{record_id}")
        if isinstance(payload, dict):
            if payload.get("success") is False:
                raise ApiError(payload.get("message"), payload=payload)
            return payload
        return {"success": True}


class LoanService(ResourceService):
    def return_loan(self, record_id: str, when: Optional[datetime] = None):
        when = when or datetime.now(timezone.utc)
        return self.update(record_id, {"returnedAt": when.isoformat()})


def check_health(client: ApiClient) -> str:
    try:
        payload = client.get("/health")
    except ApiError:
        return "unavailable"
    if isinstance(payload, dict) and payload.get("success"):
        return "healthy"
    return "unavailable"


class LibraryApi:
    def __init__(self, client: ApiClient, strict: bool = True):
        self.client = client
        self.books = ResourceService(client, "books", Book, strict)
        self.members = ResourceService(client, "members", Member, strict)
        self.loans = LoanService(client, "loans", Loan, strict)

    def health(self) -> str:
        return check_health(self.client)


class HotelApi:
    def __init__(self, client: ApiClient, strict: bool = True):
        self.client = client
        self.guests = ResourceService(client, "guests", Guest, strict)
        self.rooms = ResourceService(client, "rooms", Room, strict)
        self.bookings = ResourceService(client, "bookings", Booking, strict)

    def health(self) -> str:
        return check_health(self.client)


class Backends:
    """Builds the two API facades from the Flask config.

    Used like a Flask extension: ``backends.init_app(app)``.
    """

    def __init__(self, app=None):
        self.library: Optional[LibraryApi] = None
        self.hotel: Optional[HotelApi] = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app, library_session=None, hotel_session=None):
        timeout = app.config.get("API_TIMEOUT")
        self.library = LibraryApi(
            ApiClient(app.config["LIBRARY_API_URL"], library_session, timeout),
            app.config.get("LIBRARY_API_STRICT", True),
        )
        self.hotel = HotelApi(
            ApiClient(app.config["HOTEL_API_URL"], hotel_session, timeout),
            app.config.get("HOTEL_API_STRICT", True),
        )
        app.extensions["backends"] = self


backends = Backends()
