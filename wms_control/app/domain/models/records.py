"""Domain records mirrored from backend tables.

Records are plain frozen attribute bags. A record whose id carries the
placeholder prefix was created locally while the backend was unreachable and
is not yet confirmed; :func:`parse_record_id` turns the raw id into the
``Persisted | Pending`` variant that reconciliation branches on.
"""

from __future__ import annotations

import random
import string
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Union

from wms_control.app.domain.models.profile import Permission

PLACEHOLDER_PREFIX = "temp-"
_BASE36 = string.digits + string.ascii_lowercase
DEFAULT_RACK_CAPACITY = 4
DEFAULT_STORAGE_TEMP = -18.0


@dataclass(frozen=True)
class Persisted:
    id: str

    @property
    def value(self) -> str:
        return self.id


@dataclass(frozen=True)
class Pending:
    placeholder_id: str

    @property
    def value(self) -> str:
        return self.placeholder_id


RecordId = Union[Persisted, Pending]


def parse_record_id(value: str) -> RecordId:
    if str(value).startswith(PLACEHOLDER_PREFIX):
        return Pending(str(value))
    return Persisted(str(value))


def new_placeholder_id(now_ms: int | None = None, rng: random.Random | None = None) -> str:
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    rng = rng or random
    suffix = "".join(rng.choice(_BASE36) for _ in range(9))
    return f"{PLACEHOLDER_PREFIX}{now_ms}-{suffix}"


class _Record:
    id: str

    @property
    def record_id(self) -> RecordId:
        return parse_record_id(self.id)

    @property
    def is_pending(self) -> bool:
        return isinstance(self.record_id, Pending)

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Product(_Record):
    id: str
    code: str
    inbound_at: str | None = None
    outbound_at: str | None = None
    weight: float = 0
    manufacturer: str = ""
    floor: int | None = None

    @property
    def natural_key(self) -> tuple:
        # Many stock items share a code; only a row matching every column confirms a pending one.
        return (self.code, self.inbound_at, self.outbound_at, self.weight, self.manufacturer, self.floor)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Product":
        return cls(
            id=str(payload.get("id", "")),
            code=str(payload.get("code") or ""),
            inbound_at=payload.get("inbound_at"),
            outbound_at=payload.get("outbound_at"),
            weight=payload.get("weight") or 0,
            manufacturer=str(payload.get("manufacturer") or ""),
            floor=payload.get("floor"),
        )


@dataclass(frozen=True)
class Rack(_Record):
    id: str
    name: str
    capacity: int = DEFAULT_RACK_CAPACITY
    line: str = ""
    # Assembled from the rack_products join; never written back to the racks table.
    products: tuple[Product, ...] = field(default_factory=tuple)

    @property
    def natural_key(self) -> tuple:
        return (self.name, self.capacity, self.line)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Rack":
        return cls(
            id=str(payload.get("id", "")),
            name=str(payload.get("name") or ""),
            capacity=int(payload.get("capacity") or DEFAULT_RACK_CAPACITY),
            line=str(payload.get("line") or ""),
            products=tuple(
                Product.from_payload(item) for item in payload.get("products") or [] if isinstance(item, dict)
            ),
        )


@dataclass(frozen=True)
class Category(_Record):
    id: str
    name: str
    created_at: str | None = None

    @property
    def natural_key(self) -> str:
        return self.name

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Category":
        return cls(
            id=str(payload.get("id", "")),
            name=str(payload.get("name") or ""),
            created_at=payload.get("created_at"),
        )


@dataclass(frozen=True)
class ProductCode(_Record):
    id: str
    code: str
    name: str = ""
    description: str = ""
    category: str | None = None
    storage_temp: float = DEFAULT_STORAGE_TEMP
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def natural_key(self) -> str:
        return self.code

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ProductCode":
        storage_temp = payload.get("storage_temp")
        return cls(
            id=str(payload.get("id", "")),
            code=str(payload.get("code") or ""),
            name=str(payload.get("name") or ""),
            description=str(payload.get("description") or ""),
            category=payload.get("category"),
            storage_temp=DEFAULT_STORAGE_TEMP if storage_temp in (None, "") else storage_temp,
            created_at=payload.get("created_at"),
            updated_at=payload.get("updated_at"),
        )


@dataclass(frozen=True)
class UserRecord(_Record):
    id: str
    email: str
    name: str = ""
    role: str = "viewer"
    status: str = "active"
    permissions: tuple[Permission, ...] = field(default_factory=tuple)

    @property
    def natural_key(self) -> str:
        return self.email.strip().lower()

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "UserRecord":
        return cls(
            id=str(payload.get("id", "")),
            email=str(payload.get("email") or ""),
            name=str(payload.get("name") or ""),
            role=str(payload.get("role") or "viewer"),
            status=str(payload.get("status") or "active"),
            permissions=tuple(
                Permission.from_payload(entry) for entry in payload.get("permissions") or [] if isinstance(entry, dict)
            ),
        )


@dataclass(frozen=True)
class StockMovement(_Record):
    id: str
    user_id: str | None = None
    product_id: str = "N/A"
    rack_id: str | None = None
    type: str = ""
    quantity: int = 0
    moved_at: str | None = None
    details: str | None = None

    @property
    def natural_key(self) -> str:
        return self.id

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "StockMovement":
        return cls(
            id=str(payload.get("id", "")),
            user_id=payload.get("user_id"),
            product_id=str(payload.get("product_id") or "N/A"),
            rack_id=payload.get("rack_id"),
            type=str(payload.get("type") or ""),
            quantity=int(payload.get("quantity") or 0),
            moved_at=payload.get("moved_at"),
            details=payload.get("details"),
        )
