"""In-memory stand-ins for Firestore, Cloud Storage and the callable functions gateway.

The Firestore fake implements just the surface the services use:
collection/document/collection_group references, ``where(filter=...)``,
``order_by``, ``limit``, and async ``get``/``stream``/``add``/``set``/
``update``/``delete``. Like Firestore, filters and orderings skip documents
that lack the field.
"""
import json
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import httpx
from google.api_core.exceptions import NotFound
from google.cloud.firestore import SERVER_TIMESTAMP

from polyface.core.functions import FunctionsClient

_MISSING = object()


def _resolve_sentinels(data: dict[str, Any]) -> dict[str, Any]:
    now = datetime.now(timezone.utc)
    return {k: (now if v is SERVER_TIMESTAMP else v) for k, v in data.items()}


def _compare(op: str, left: Any, right: Any) -> bool:
    if op == "==":
        return left == right
    if op == "!=":
        return left != right
    if op == "<":
        return left < right
    if op == "<=":
        return left <= right
    if op == ">":
        return left > right
    if op == ">=":
        return left >= right
    if op == "in":
        return left in right
    if op == "array_contains":
        return isinstance(left, list) and right in left
    raise ValueError(f"Unsupported operator: {op}")


# =============================================================================
# Firestore
# =============================================================================


class FakeSnapshot:
    def __init__(self, reference: "FakeDocumentRef", data: dict[str, Any] | None):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> dict[str, Any] | None:
        return dict(self._data) if self._data is not None else None


class FakeQuery:
    def __init__(
        self,
        db: "FakeFirestore",
        collection_path: str | None = None,
        group: str | None = None,
        filters: tuple = (),
        orders: tuple = (),
        limit_to: int | None = None,
    ):
        self._db = db
        self._collection_path = collection_path
        self._group = group
        self._filters = filters
        self._orders = orders
        self._limit = limit_to

    def _copy(self, **changes) -> "FakeQuery":
        params = {
            "collection_path": self._collection_path,
            "group": self._group,
            "filters": self._filters,
            "orders": self._orders,
            "limit_to": self._limit,
        }
        params.update(changes)
        return FakeQuery(self._db, **params)

    def where(self, field_path=None, op_string=None, value=None, *, filter=None) -> "FakeQuery":
        if filter is not None:
            field_path, op_string, value = filter.field_path, filter.op_string, filter.value
        return self._copy(filters=self._filters + ((field_path, op_string, value),))

    def order_by(self, field_path: str, direction: str = "ASCENDING") -> "FakeQuery":
        return self._copy(orders=self._orders + ((field_path, direction),))

    def limit(self, count: int) -> "FakeQuery":
        return self._copy(limit_to=count)

    def _in_scope(self, path: str) -> bool:
        parent, _, _ = path.rpartition("/")
        if self._collection_path is not None:
            return parent == self._collection_path
        return parent.rsplit("/", 1)[-1] == self._group

    def _snapshots(self) -> list[FakeSnapshot]:
        self._db.check_read()
        matches = []
        for path, data in self._db.documents.items():
            if not self._in_scope(path):
                continue
            if not all(
                data.get(field, _MISSING) is not _MISSING and _compare(op, data[field], value)
                for field, op, value in self._filters
            ):
                continue
            if any(field not in data for field, _ in self._orders):
                continue
            matches.append((path, data))

        for field, direction in reversed(self._orders):
            matches.sort(key=lambda item: item[1][field], reverse=direction == "DESCENDING")
        if self._limit is not None:
            matches = matches[: self._limit]
        return [FakeSnapshot(FakeDocumentRef(self._db, path), dict(data)) for path, data in matches]

    async def get(self) -> list[FakeSnapshot]:
        return self._snapshots()

    async def stream(self):
        for snapshot in self._snapshots():
            yield snapshot


class FakeCollection(FakeQuery):
    def __init__(self, db: "FakeFirestore", path: str):
        super().__init__(db, collection_path=path)
        self.path = path
        self.id = path.rsplit("/", 1)[-1]

    @property
    def parent(self) -> "FakeDocumentRef | None":
        if "/" not in self.path:
            return None
        return FakeDocumentRef(self._db, self.path.rsplit("/", 1)[0])

    def document(self, document_id: str | None = None) -> "FakeDocumentRef":
        return FakeDocumentRef(self._db, f"{self.path}/{document_id or uuid.uuid4().hex[:20]}")

    async def add(self, data: dict[str, Any]) -> tuple[datetime, "FakeDocumentRef"]:
        ref = self.document()
        await ref.set(data)
        return datetime.now(timezone.utc), ref


class FakeDocumentRef:
    def __init__(self, db: "FakeFirestore", path: str):
        self._db = db
        self.path = path
        self.id = path.rsplit("/", 1)[-1]

    @property
    def parent(self) -> FakeCollection:
        return FakeCollection(self._db, self.path.rsplit("/", 1)[0])

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self._db, f"{self.path}/{name}")

    async def get(self) -> FakeSnapshot:
        self._db.check_read()
        data = self._db.documents.get(self.path)
        return FakeSnapshot(self, dict(data) if data is not None else None)

    async def set(self, data: dict[str, Any], merge: bool = False) -> None:
        resolved = _resolve_sentinels(data)
        if merge and self.path in self._db.documents:
            self._db.documents[self.path].update(resolved)
        else:
            self._db.documents[self.path] = resolved

    async def update(self, data: dict[str, Any]) -> None:
        if self.path not in self._db.documents:
            raise NotFound(f"No document to update: {self.path}")
        self._db.documents[self.path].update(_resolve_sentinels(data))

    async def delete(self) -> None:
        self._db.documents.pop(self.path, None)


class FakeFirestore:
    """Flat path -> data store behind the Firestore reference API."""

    def __init__(self):
        self.documents: dict[str, dict[str, Any]] = {}
        # Raised by every read while set
        self.fail_reads: Exception | None = None

    def check_read(self) -> None:
        if self.fail_reads is not None:
            raise self.fail_reads

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)

    def collection_group(self, name: str) -> FakeQuery:
        return FakeQuery(self, group=name)

    def seed(self, path: str, data: dict[str, Any]) -> str:
        self.documents[path] = dict(data)
        return path.rsplit("/", 1)[-1]

    def data(self, path: str) -> dict[str, Any] | None:
        return self.documents.get(path)

    def paths_under(self, collection_path: str) -> list[str]:
        return [p for p in self.documents if p.rpartition("/")[0] == collection_path]


# =============================================================================
# Cloud Storage
# =============================================================================


class FakeBlob:
    def __init__(self, bucket: "FakeBucket", name: str):
        self.bucket = bucket
        self.name = name
        self.metadata: dict[str, str] | None = None

    def upload_from_string(self, data: bytes, content_type: str | None = None) -> None:
        self.bucket.uploads[self.name] = {
            "data": data,
            "content_type": content_type,
            "metadata": dict(self.metadata or {}),
        }


class FakeBucket:
    def __init__(self, name: str = "polyface-test.appspot.com"):
        self.name = name
        self.uploads: dict[str, dict[str, Any]] = {}

    def blob(self, name: str) -> FakeBlob:
        return FakeBlob(self, name)


# =============================================================================
# Callable functions gateway
# =============================================================================


class FakeFunctionsGateway:
    """Answers callable-function requests from canned responses and records calls."""

    base_url = "https://us-central1-polyface-test.cloudfunctions.net"

    def __init__(self):
        self.calls: list[dict[str, Any]] = []
        self._handlers: dict[str, Callable[[dict[str, Any]], httpx.Response]] = {}

    def respond(self, name: str, result: Any = None) -> None:
        self._handlers[name] = lambda payload: httpx.Response(200, json={"result": result})

    def fail(self, name: str, message: str, status_code: int = 400) -> None:
        body = {"error": {"message": message, "status": "FAILED_PRECONDITION"}}
        self._handlers[name] = lambda payload: httpx.Response(status_code, json=body)

    def handle(self, name: str, handler: Callable[[dict[str, Any]], Any]) -> None:
        """Compute the result from the request payload."""
        self._handlers[name] = lambda payload: httpx.Response(200, json={"result": handler(payload)})

    def calls_to(self, name: str) -> list[dict[str, Any]]:
        return [c["payload"] for c in self.calls if c["name"] == name]

    def _dispatch(self, request: httpx.Request) -> httpx.Response:
        name = request.url.path.rsplit("/", 1)[-1]
        payload = json.loads(request.content)["data"]
        self.calls.append(
            {"name": name, "payload": payload, "authorization": request.headers.get("Authorization")}
        )
        handler = self._handlers.get(name)
        if handler is None:
            return httpx.Response(404, json={"error": {"message": f"Function {name} not found"}})
        return handler(payload)

    def client(self) -> FunctionsClient:
        return FunctionsClient(self.base_url, timeout=5.0, transport=httpx.MockTransport(self._dispatch))


# =============================================================================
# Document builders
# =============================================================================


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def credit_doc(
    package_type: str = "single",
    total: int = 1,
    used: int = 0,
    expires_in: timedelta = timedelta(days=30),
    purchased_ago: timedelta = timedelta(days=1),
    now: datetime | None = None,
) -> dict[str, Any]:
    now = now or utcnow()
    return {
        "packageType": package_type,
        "totalLessons": total,
        "lessonsUsed": used,
        "purchaseDate": now - purchased_ago,
        "expirationDate": now + expires_in,
        "transactionId": f"txn_{uuid.uuid4().hex[:8]}",
    }


def slot_doc(
    starts_in: timedelta,
    status: str = "open",
    minutes: int = 60,
    now: datetime | None = None,
) -> dict[str, Any]:
    start = (now or utcnow()) + starts_in
    return {
        "title": "Private Lesson",
        "status": status,
        "startTime": start,
        "endTime": start + timedelta(minutes=minutes),
    }


def class_doc(
    starts_in: timedelta = timedelta(days=3),
    max_participants: int = 10,
    current: int = 0,
    is_open: bool = True,
    now: datetime | None = None,
) -> dict[str, Any]:
    now = now or utcnow()
    start = now + starts_in
    return {
        "title": "Serving Clinic",
        "description": "Float and jump serves",
        "startTime": start,
        "endTime": start + timedelta(minutes=90),
        "maxParticipants": max_participants,
        "currentParticipants": current,
        "location": "Main Gym",
        "isOpenForRegistration": is_open,
        "createdBy": "admin-1",
        "createdAt": now - timedelta(days=7),
    }
