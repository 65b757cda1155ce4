"""In-memory cache of the warehouse collections with a durable local mirror.

Reads are refreshed from the backend in one all-or-nothing batch; writes try
the backend first and fall back to a local mutation when it is unreachable.
Locally created records carry a placeholder id and survive refreshes until a
server row with the same natural key shows up.
"""

from __future__ import annotations

import dataclasses
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from clients.wms_backend_sdk.errors import BackendError
from clients.wms_backend_sdk.realtime import ChangeEvent, ChangeFeed, Subscription
from wms_control.app.config import AppConfig
from wms_control.app.domain.models.profile import Permission
from wms_control.app.domain.models.records import (
    Category,
    Pending,
    Product,
    ProductCode,
    Rack,
    StockMovement,
    UserRecord,
    new_placeholder_id,
)
from wms_control.app.infrastructure.logging.logger import get_logger
from wms_control.app.infrastructure.sdk_adapter import record_mapper
from wms_control.app.infrastructure.sdk_adapter.warehouse_adapter import (
    CATEGORIES,
    PRODUCT_CODES,
    PRODUCTS,
    RACKS,
    USERS,
    WarehouseAdapter,
)
from wms_control.app.local_mirror import LocalMirror
from wms_control.app.scheduler import Debouncer, PeriodicTask, Scheduler

logger = get_logger("wms_control.data_cache")

_RECORD_TYPES: dict[str, type] = {
    "products": Product,
    "racks": Rack,
    "categories": Category,
    "users": UserRecord,
    "product_codes": ProductCode,
    "stock_movements": StockMovement,
}
COLLECTIONS: tuple[str, ...] = tuple(_RECORD_TYPES)


@dataclass(frozen=True)
class CacheSnapshot:
    products: tuple[Product, ...] = ()
    racks: tuple[Rack, ...] = ()
    categories: tuple[Category, ...] = ()
    users: tuple[UserRecord, ...] = ()
    product_codes: tuple[ProductCode, ...] = ()
    stock_movements: tuple[StockMovement, ...] = ()

    def collection(self, name: str) -> tuple:
        if name not in _RECORD_TYPES:
            raise KeyError(name)
        return getattr(self, name)

    def pending(self, name: str) -> tuple:
        return tuple(record for record in self.collection(name) if isinstance(record.record_id, Pending))


CacheListener = Callable[["DataCacheController"], None]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DataCacheController:
    def __init__(
        self,
        adapter: WarehouseAdapter,
        changes: ChangeFeed,
        mirror: LocalMirror,
        scheduler: Scheduler,
        config: AppConfig | None = None,
        executor: Executor | None = None,
    ) -> None:
        self.adapter = adapter
        self.changes = changes
        self.mirror = mirror
        self.scheduler = scheduler
        self.config = config or AppConfig()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=len(COLLECTIONS), thread_name_prefix="wms-refresh")

        self._lock = threading.RLock()
        self._snapshot = CacheSnapshot()
        self._last_refreshed_at: float | None = None
        self._requested_seq = 0
        self._applied_seq = 0
        self._in_flight = 0
        self._started = False
        self._alive = True
        self._subscription: Subscription | None = None
        self._listeners: list[CacheListener] = []
        self._debouncer = Debouncer(scheduler, self.config.refresh_debounce_seconds, self.refresh)
        self._periodic = PeriodicTask(scheduler, self.config.refresh_check_interval_seconds, self._check_staleness)

    def snapshot(self) -> CacheSnapshot:
        with self._lock:
            return self._snapshot

    @property
    def last_refreshed_at(self) -> float | None:
        return self._last_refreshed_at

    @property
    def is_loading(self) -> bool:
        with self._lock:
            return self._in_flight > 0 or (self._started and self._last_refreshed_at is None)

    def add_listener(self, listener: CacheListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def _remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _remove

    def start(self) -> None:
        with self._lock:
            if self._started or not self._alive:
                return
            self._started = True
            self._snapshot = self._load_mirror()
            self._subscription = self.changes.subscribe(self._on_change)
        self._periodic.start()
        self.scheduler.call_later(0, self.refresh)
        self._notify()

    def close(self) -> None:
        with self._lock:
            if not self._alive:
                return
            self._alive = False
            subscription, self._subscription = self._subscription, None
            self._listeners.clear()
        self._debouncer.cancel()
        self._periodic.cancel()
        if subscription is not None:
            subscription.unsubscribe()
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def request_refresh(self) -> None:
        if self._alive:
            self._debouncer.trigger()

    def refresh(self) -> bool:
        with self._lock:
            if not self._alive:
                return False
            self._requested_seq += 1
            seq = self._requested_seq
            self._in_flight += 1
        self._notify()
        try:
            batch = self._fetch_all()
        except BackendError as error:
            logger.warning(
                "refresh discarded; keeping cached data code=%s kind=%s", error.code, error.kind.value
            )
            with self._lock:
                if self._alive:
                    self._last_refreshed_at = self.scheduler.now()
            return False
        finally:
            with self._lock:
                self._in_flight -= 1
            self._notify()

        fetched = self._build_snapshot(batch)
        with self._lock:
            if not self._alive:
                return False
            if seq < self._applied_seq:
                logger.info("dropping stale refresh seq=%s applied=%s", seq, self._applied_seq)
                return False
            self._applied_seq = seq
            self._snapshot = self._with_pending(fetched, self._snapshot)
            self._last_refreshed_at = self.scheduler.now()
            snapshot = self._snapshot
        for name in COLLECTIONS:
            self._persist(name, snapshot.collection(name))
        logger.info("refresh applied seq=%s", seq)
        self._notify()
        return True

    # products

    def add_product(self, values: dict[str, Any]) -> Product:
        return self._add(
            "products",
            PRODUCTS,
            record_mapper.product_to_row(values),
            record_mapper.product_from_row,
            lambda placeholder: Product.from_payload({**values, "id": placeholder}),
        )

    def update_product(self, record_id: str, updates: dict[str, Any]) -> Product | None:
        return self._update(
            "products", PRODUCTS, record_id, updates, record_mapper.product_to_row(updates), record_mapper.product_from_row
        )

    def delete_product(self, record_id: str) -> None:
        self._delete("products", PRODUCTS, record_id)

    # racks

    def add_rack(self, values: dict[str, Any]) -> Rack:
        return self._add(
            "racks",
            RACKS,
            record_mapper.rack_to_row(values),
            lambda row: record_mapper.rack_from_row(row, {}),
            lambda placeholder: Rack.from_payload({**values, "id": placeholder, "products": []}),
        )

    def update_rack(self, record_id: str, updates: dict[str, Any]) -> Rack | None:
        updates = {key: value for key, value in updates.items() if key != "products"}

        def _from_row(row: dict[str, Any]) -> Rack:
            existing = self._find("racks", record_id)
            rack = record_mapper.rack_from_row(row, {})
            return dataclasses.replace(rack, products=existing.products) if existing else rack

        return self._update("racks", RACKS, record_id, updates, record_mapper.rack_to_row(updates), _from_row)

    def delete_rack(self, record_id: str) -> None:
        self._delete("racks", RACKS, record_id)

    # categories

    def add_category(self, values: dict[str, Any]) -> Category:
        return self._add(
            "categories",
            CATEGORIES,
            record_mapper.category_to_row(values),
            record_mapper.category_from_row,
            lambda placeholder: Category(id=placeholder, name=str(values.get("name") or ""), created_at=_utc_now_iso()),
        )

    def update_category(self, record_id: str, updates: dict[str, Any]) -> Category | None:
        return self._update(
            "categories",
            CATEGORIES,
            record_id,
            updates,
            record_mapper.category_to_row(updates),
            record_mapper.category_from_row,
        )

    def delete_category(self, record_id: str) -> None:
        self._delete("categories", CATEGORIES, record_id)

    # product codes

    def add_product_code(self, values: dict[str, Any]) -> ProductCode:
        def _local(placeholder: str) -> ProductCode:
            now = _utc_now_iso()
            return ProductCode.from_payload({**values, "id": placeholder, "created_at": now, "updated_at": now})

        return self._add(
            "product_codes",
            PRODUCT_CODES,
            record_mapper.product_code_to_row(values),
            record_mapper.product_code_from_row,
            _local,
        )

    def update_product_code(self, record_id: str, updates: dict[str, Any]) -> ProductCode | None:
        return self._update(
            "product_codes",
            PRODUCT_CODES,
            record_id,
            {**updates, "updated_at": _utc_now_iso()},
            record_mapper.product_code_to_row(updates),
            record_mapper.product_code_from_row,
        )

    def delete_product_code(self, record_id: str) -> None:
        self._delete("product_codes", PRODUCT_CODES, record_id)

    # users

    def add_user(self, values: dict[str, Any]) -> UserRecord:
        values = {key: value for key, value in values.items() if key != "password"}
        values.setdefault("status", "active")
        return self._add(
            "users",
            USERS,
            record_mapper.user_to_row(values),
            record_mapper.user_from_row,
            lambda placeholder: record_mapper.user_from_row({**record_mapper.user_to_row(values), "id": placeholder}),
        )

    def update_user(self, record_id: str, updates: dict[str, Any]) -> UserRecord | None:
        updates = {key: value for key, value in updates.items() if key != "password"}
        if "permissions" in updates:
            updates["permissions"] = tuple(
                entry if isinstance(entry, Permission) else Permission.from_payload(entry)
                for entry in updates["permissions"]
            )
        return self._update(
            "users", USERS, record_id, updates, record_mapper.user_to_row(updates), record_mapper.user_from_row
        )

    def delete_user(self, record_id: str) -> None:
        self._delete("users", USERS, record_id)

    def record_user(self, user: UserRecord) -> UserRecord:
        """Merge a user created elsewhere (the admin endpoint) without another table write."""
        self._apply("users", lambda items: _upsert(items, user))
        return user

    def _add(
        self,
        name: str,
        table: str,
        row: dict[str, Any],
        from_row: Callable[[dict[str, Any]], Any],
        local_factory: Callable[[str], Any],
    ):
        try:
            created = self.adapter.insert(table, row)
        except BackendError as error:
            logger.warning("add to %s failed remotely; applying locally code=%s", table, error.code)
            created = None
        if created is None:
            record = local_factory(new_placeholder_id())
        else:
            record = from_row(created)
        self._apply(name, lambda items: _upsert(items, record))
        return record

    def _update(
        self,
        name: str,
        table: str,
        record_id: str,
        updates: dict[str, Any],
        row: dict[str, Any],
        from_row: Callable[[dict[str, Any]], Any],
    ):
        existing = self._find(name, record_id)
        updated_row = None
        if existing is not None and isinstance(existing.record_id, Pending):
            logger.info("updating pending %s record %s locally", table, record_id)
        else:
            try:
                updated_row = self.adapter.update(table, record_id, row)
            except BackendError as error:
                logger.warning("update of %s/%s failed remotely; applying locally code=%s", table, record_id, error.code)
        if updated_row is not None:
            record = from_row(updated_row)
        elif existing is not None:
            fields = {field.name for field in dataclasses.fields(existing)} - {"id"}
            record = dataclasses.replace(existing, **{key: value for key, value in updates.items() if key in fields})
        else:
            return None
        self._apply(name, lambda items: _upsert(items, record))
        return record

    def _delete(self, name: str, table: str, record_id: str) -> None:
        existing = self._find(name, record_id)
        if existing is None or not isinstance(existing.record_id, Pending):
            try:
                self.adapter.delete(table, record_id)
            except BackendError as error:
                logger.warning("delete of %s/%s failed remotely; applying locally code=%s", table, record_id, error.code)
        self._apply(name, lambda items: tuple(item for item in items if item.id != record_id))

    def _find(self, name: str, record_id: str):
        with self._lock:
            for record in self._snapshot.collection(name):
                if record.id == record_id:
                    return record
        return None

    def _apply(self, name: str, change: Callable[[tuple], tuple]) -> None:
        with self._lock:
            if not self._alive:
                return
            items = change(self._snapshot.collection(name))
            self._snapshot = dataclasses.replace(self._snapshot, **{name: items})
        self._persist(name, items)
        self._notify()

    def _fetch_all(self) -> dict[str, list[dict[str, Any]]]:
        fetchers = {
            "products": self.adapter.fetch_products,
            "racks": self.adapter.fetch_racks,
            "categories": self.adapter.fetch_categories,
            "users": self.adapter.fetch_users,
            "product_codes": self.adapter.fetch_product_codes,
            "stock_movements": self.adapter.fetch_activity_logs,
        }
        futures = {name: self._executor.submit(fetch) for name, fetch in fetchers.items()}
        return {name: future.result() for name, future in futures.items()}

    @staticmethod
    def _build_snapshot(batch: dict[str, list[dict[str, Any]]]) -> CacheSnapshot:
        product_rows = batch["products"]
        products_by_id = {str(row.get("id")): row for row in product_rows}
        return CacheSnapshot(
            products=tuple(record_mapper.product_from_row(row) for row in product_rows),
            racks=tuple(record_mapper.rack_from_row(row, products_by_id) for row in batch["racks"]),
            categories=tuple(record_mapper.category_from_row(row) for row in batch["categories"]),
            users=tuple(record_mapper.user_from_row(row) for row in batch["users"]),
            product_codes=tuple(record_mapper.product_code_from_row(row) for row in batch["product_codes"]),
            stock_movements=tuple(record_mapper.stock_movement_from_row(row) for row in batch["stock_movements"]),
        )

    @staticmethod
    def _with_pending(fetched: CacheSnapshot, current: CacheSnapshot) -> CacheSnapshot:
        merged: dict[str, tuple] = {}
        for name in COLLECTIONS:
            server = fetched.collection(name)
            confirmed = {record.natural_key for record in server}
            unconfirmed = tuple(record for record in current.pending(name) if record.natural_key not in confirmed)
            merged[name] = server + unconfirmed
        return CacheSnapshot(**merged)

    def _load_mirror(self) -> CacheSnapshot:
        loaded: dict[str, tuple] = {}
        for name, record_type in _RECORD_TYPES.items():
            payload = self.mirror.read(name, default=[])
            if not isinstance(payload, list):
                payload = []
            loaded[name] = tuple(record_type.from_payload(item) for item in payload if isinstance(item, dict))
        return CacheSnapshot(**loaded)

    def _persist(self, name: str, items: Iterable) -> None:
        self.mirror.write(name, [item.to_payload() for item in items])

    def _on_change(self, event: ChangeEvent) -> None:
        logger.info("change received table=%s event=%s", event.table, event.event)
        self.request_refresh()

    def _check_staleness(self) -> None:
        last = self._last_refreshed_at
        if last is None or self.scheduler.now() - last >= self.config.stale_after_seconds:
            logger.info("cache stale; refreshing")
            self.refresh()

    def _notify(self) -> None:
        with self._lock:
            if not self._alive:
                return
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception:
                logger.exception("cache listener failed")


def _upsert(items: tuple, record) -> tuple:
    replaced = False
    updated = []
    for item in items:
        if item.id == record.id:
            updated.append(record)
            replaced = True
        else:
            updated.append(item)
    if not replaced:
        updated.append(record)
    return tuple(updated)
