import math

import pytest
import requests

from app import app as flask_app
from services import backends


class FakeResponse:
    def __init__(self, status_code=200, payload=None, body=None):
        self.status_code = status_code
        self._payload = payload
        if body is not None:
            self.content = body
        else:
            self.content = b"" if payload is None else b"{...}"

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class FakeBackend:
    """Stands in for ``requests.Session`` against one backend.

    Explicit routes win; otherwise registered collections answer the usual
    list / get / create / update / delete calls from memory.
    """

    def __init__(self, base_url):
        self.base_url = base_url
        self.headers = {}
        self.routes = {}
        self.collections = {}
        self.calls = []
        self._next_id = 100

    def route(self, method, path, payload=None, status=200):
        self.routes[(method, path)] = FakeResponse(status, payload)

    def fail(self, method, path, exc=None):
        self.routes[(method, path)] = exc or requests.ConnectionError("backend down")

    def collection(self, name, docs):
        self.collections[name] = [dict(doc) for doc in docs]
        return self.collections[name]

    def calls_to(self, method, path=None):
        return [c for c in self.calls if c[0] == method and (path is None or c[1] == path)]

    def request(self, method, url, params=None, json=None, timeout=None):
        path = url[len(self.base_url):]
        self.calls.append((method, path, params, json))

        handler = self.routes.get((method, path))
        if isinstance(handler, Exception):
            raise handler
        if handler is not None:
            return handler

        parts = path.strip("/").split("/")
        docs = self.collections.get(parts[0])
        if docs is None:
            return FakeResponse(404, {"success": False, "message": "Route not found"})
        if len(parts) == 1:
            return self._collection_call(method, docs, params, json)
        return self._item_call(method, docs, parts[1], json)

    def _collection_call(self, method, docs, params, json):
        if method == "GET":
            page = int((params or {}).get("page", 1))
            limit = int((params or {}).get("limit", 10))
            start = (page - 1) * limit
            pages = max(math.ceil(len(docs) / limit), 1)
            return FakeResponse(200, {
                "success": True,
                "data": docs[start:start + limit],
                "pagination": {"page": page, "pages": pages, "total": len(docs)},
            })
        if method == "POST":
            self._next_id += 1
            doc = dict(json, _id=f"id{self._next_id}")
            docs.append(doc)
            return FakeResponse(201, {"success": True, "data": doc})
        return FakeResponse(405, {"message": "Method not allowed"})

    def _item_call(self, method, docs, record_id, json):
        doc = next((d for d in docs if d["_id"] == record_id), None)
        if doc is None:
            return FakeResponse(404, {"success": False, "message": "Not found"})
        if method == "GET":
            return FakeResponse(200, {"success": True, "data": doc})
        if method == "PUT":
            doc.update(json or {})
            return FakeResponse(200, {"success": True, "data": doc})
        if method == "DELETE":
            docs.remove(doc)
            return FakeResponse(200, {"success": True, "message": "Deleted"})
        return FakeResponse(405, {"message": "Method not allowed"})


BOOKS = [
    {"_id": "b1", "isbn": "9780140449136", "title": "The Odyssey", "author": "Homer", "copies": 3},
    {"_id": "b2", "isbn": "9780141439518", "title": "Pride and Prejudice", "author": "Jane Austen", "copies": 0},
    {"_id": "b3", "isbn": "9780486284736", "title": "Dracula", "author": "Bram Stoker", "copies": 2},
]

MEMBERS = [
    {"_id": "m1", "name": "Ada Lovelace", "email": "ada@example.com", "joinedAt": "2024-01-05T00:00:00.000Z"},
    {"_id": "m2", "name": "Alan Turing", "email": "alan@example.com", "joinedAt": "2024-02-11T00:00:00.000Z"},
]

LOANS = [
    {
        "_id": "64f0c0ffee0001",
        "memberId": {"_id": "m1", "name": "Ada Lovelace", "email": "ada@example.com"},
        "bookId": {"_id": "b1", "title": "The Odyssey", "author": "Homer", "isbn": "9780140449136"},
        "loanedAt": "2024-03-01T00:00:00.000Z",
        "dueAt": "2024-03-15T00:00:00.000Z",
        "returnedAt": None,
    },
    {
        "_id": "64f0c0ffee0002",
        "memberId": "m2",
        "bookId": "b3",
        "loanedAt": "2024-03-01T00:00:00.000Z",
        "dueAt": "2999-03-15T00:00:00.000Z",
        "returnedAt": "2024-03-10T00:00:00.000Z",
    },
]

GUESTS = [
    {"_id": "g1", "name": "Grace Hopper", "email": "grace@example.com", "phone": "555-0100", "address": "1 Navy Way"},
]

ROOMS = [
    {"_id": "r1", "number": "101", "type": "single", "price": 80, "capacity": 1, "status": "available", "amenities": ["WiFi"]},
    {"_id": "r2", "number": "201", "type": "suite", "price": 250, "capacity": 4, "status": "occupied", "amenities": []},
]

BOOKINGS = [
    {"_id": "k1", "guestId": "g1", "roomId": "r2", "checkIn": "2024-05-01", "checkOut": "2024-05-04",
     "status": "confirmed", "totalPrice": 750, "notes": "Late arrival"},
    {"_id": "k2", "guestId": "gone", "roomId": "r1", "checkIn": "2024-04-01", "checkOut": "2024-04-02",
     "status": "completed", "totalPrice": 80, "notes": ""},
]


@pytest.fixture
def library():
    backend = FakeBackend("http://library.test/api")
    backend.collection("books", BOOKS)
    backend.collection("members", MEMBERS)
    backend.collection("loans", LOANS)
    backend.route("GET", "/health", {"success": True, "status": "ok"})
    return backend


@pytest.fixture
def hotel():
    backend = FakeBackend("http://hotel.test/api")
    backend.collection("guests", GUESTS)
    backend.collection("rooms", ROOMS)
    backend.collection("bookings", BOOKINGS)
    backend.route("GET", "/health", {"success": True})
    return backend


@pytest.fixture
def app(library, hotel):
    flask_app.config.update(
        TESTING=True,
        WTF_CSRF_ENABLED=False,
        LIBRARY_API_URL=library.base_url,
        HOTEL_API_URL=hotel.base_url,
        LIBRARY_API_STRICT=True,
        HOTEL_API_STRICT=True,
        PAGE_SIZE=2,
    )
    backends.init_app(flask_app, library_session=library, hotel_session=hotel)
    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()
