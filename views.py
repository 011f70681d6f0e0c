"""View state shared by every list page.

``ListView`` fetches and filters one page of a resource, ``FormFlow`` runs
a form submission against a service, and ``Shell`` keeps track of the open
modal.  A ``RefreshBus`` ties them together: a successful mutation publishes
the resource name and every list subscribed to it fetches again.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Sequence

from api import ApiError
from helpers import gather

logger = logging.getLogger(__name__)

IDLE = "idle"
LOADING = "loading"
SUCCESS = "success"
ERROR = "error"

MODALS = ("add", "edit", "delete", "return")


class RefreshBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[], None]]] = defaultdict(list)

    def subscribe(self, resource: str, callback: Callable[[], None]) -> Callable[[], None]:
        self._subscribers[resource].append(callback)

        def unsubscribe():
            if callback in self._subscribers[resource]:
                self._subscribers[resource].remove(callback)

        return unsubscribe

    def publish(self, resource: str) -> None:
        logger.debug("refresh %s", resource)
        for callback in list(self._subscribers[resource]):
            callback()


class ListView:
    """One paginated, searchable list of a resource."""

    def __init__(
        self,
        resource: str,
        service,
        page: int = 1,
        page_size: int = 10,
        search: str = "",
        search_fields: Sequence[str] = (),
        status: str = "all",
        fallback_error: Optional[str] = None,
        delete_error: Optional[str] = None,
        bus: Optional[RefreshBus] = None,
    ):
        self.resource = resource
        self.service = service
        self.page = max(page, 1)
        self.page_size = page_size
        self.search = search or ""
        self.search_fields = search_fields
        self.status = status or "all"
        self.fallback_error = fallback_error or f"Failed to fetch {resource}"
        self.delete_error = delete_error or f"Failed to delete {resource[:-1]}"

        self.state = IDLE
        self.rows: List[Any] = []
        self.pages = 1
        self.total = 0
        self.error: Optional[str] = None

        if bus is not None:
            bus.subscribe(resource, self.refresh)

    def load(self) -> None:
        self.state = LOADING
        try:
            result = self.service.list(self.page, self.page_size)
        except ApiError as e:
            logger.warning("fetching %s page %s failed: %s", self.resource, self.page, e)
            self.rows = []
            self.error = e.user_message(self.fallback_error)
            self.state = ERROR
            return

        # the page we were on can vanish after a delete
        if not result.items and self.page > result.pages:
            self.page = result.pages
            self.load()
            return

        self.rows = result.items
        self.pages = result.pages
        self.total = result.total
        self.error = None
        self.after_load()
        self.state = SUCCESS

    def after_load(self) -> None:
        pass

    def refresh(self) -> None:
        # a view that never loaded fetches on first render anyway
        if self.state != IDLE:
            self.load()

    def ensure_loaded(self) -> None:
        if self.state == IDLE:
            self.load()

    def _matches(self, row) -> bool:
        if self.status != "all" and getattr(row, "status", None) != self.status:
            return False
        if not self.search:
            return True
        term = self.search.lower()
        return any(term in str(getattr(row, name, "") or "").lower() for name in self.search_fields)

    @property
    def visible_rows(self) -> List[Any]:
        return [row for row in self.rows if self._matches(row)]

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    def delete(self, record_id: str, confirmed: bool = False, bus: Optional[RefreshBus] = None) -> bool:
        """Delete a record once the user has confirmed it.

        On success the resource is refreshed through ``bus`` (or directly
        when no bus is given).  On failure the rows stay as last fetched.
        """
        if not confirmed:
            return False
        try:
            self.service.delete(record_id)
        except ApiError as e:
            logger.warning("deleting %s %s failed: %s", self.resource, record_id, e)
            self.error = e.user_message(self.delete_error)
            return False

        if bus is not None:
            bus.publish(self.resource)
        else:
            self.refresh()
        return True


class BookingListView(ListView):
    """Bookings, with guest and room names filled in from their own lists."""

    def __init__(self, resource, service, guests, rooms, **kwargs):
        super().__init__(resource, service, **kwargs)
        self.guests_service = guests
        self.rooms_service = rooms

    def after_load(self) -> None:
        results, _ = gather({
            "guests": lambda: self.guests_service.list(1, 1000).items,
            "rooms": lambda: self.rooms_service.list(1, 1000).items,
        })
        guests = results.get("guests", [])
        rooms = results.get("rooms", [])
        for booking in self.rows:
            booking.resolve(guests, rooms)


class FormFlow:
    """Submit a form through a service.

    ``submit`` validates, then calls ``create`` or ``update`` exactly once.
    ``on_success`` gets the saved record; a failed call leaves the form open
    with ``error`` set.
    """

    def __init__(self, form, service, record=None, on_success: Optional[Callable[[Any], None]] = None,
                 fallback_error: str = "Operation failed"):
        self.form = form
        self.service = service
        self.record = record
        self.on_success = on_success
        self.fallback_error = fallback_error
        self.error: Optional[str] = None
        self.saved = None

    @property
    def editing(self) -> bool:
        return self.record is not None

    def submit(self) -> bool:
        if not self.form.validate():
            return False

        payload = self.form.payload()
        try:
            if self.editing:
                saved = self.service.update(self.record.id, payload)
            else:
                saved = self.service.create(payload)
        except ApiError as e:
            logger.warning("saving %s failed: %s", type(self.form).__name__, e)
            if not self.form.claim_api_error(e):
                self.error = e.user_message(self.fallback_error)
            return False

        self.saved = saved
        if self.on_success:
            self.on_success(saved)
        self.error = None
        return True


class Shell:
    """Which modal is open, for which record, and where refreshes go."""

    def __init__(self, bus: Optional[RefreshBus] = None):
        self.bus = bus or RefreshBus()
        self.modal: Optional[str] = None
        self.selected = None

    @classmethod
    def from_args(cls, args, bus: Optional[RefreshBus] = None) -> "Shell":
        shell = cls(bus)
        modal = args.get("modal")
        if modal in MODALS:
            shell.modal = modal
        return shell

    def open(self, modal: str, record) -> None:
        self.modal = modal
        self.selected = record

    def close(self) -> None:
        self.modal = None
        self.selected = None

    def saved(self, resource: str) -> None:
        self.close()
        self.bus.publish(resource)
