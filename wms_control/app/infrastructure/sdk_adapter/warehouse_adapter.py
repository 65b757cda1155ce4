from __future__ import annotations

from typing import Any

from clients.wms_backend_sdk.table_client import TableClient
from wms_control.app.infrastructure.sdk_adapter.record_mapper import RACK_COLUMNS

PRODUCTS = "products"
RACKS = "racks"
CATEGORIES = "categories"
USERS = "users"
PRODUCT_CODES = "product_codes"
ACTIVITY_LOGS = "activity_logs"
ACTIVITY_LOG_LIMIT = 50


class WarehouseAdapter:
    def __init__(self, tables: TableClient) -> None:
        self.tables = tables

    def fetch_products(self) -> list[dict[str, Any]]:
        return self.tables.select(PRODUCTS)

    def fetch_racks(self) -> list[dict[str, Any]]:
        return self.tables.select(RACKS, columns=RACK_COLUMNS, order="name")

    def fetch_categories(self) -> list[dict[str, Any]]:
        return self.tables.select(CATEGORIES, order="name")

    def fetch_users(self) -> list[dict[str, Any]]:
        return self.tables.select(USERS, order="name")

    def fetch_product_codes(self) -> list[dict[str, Any]]:
        return self.tables.select(PRODUCT_CODES, order="code")

    def fetch_activity_logs(self) -> list[dict[str, Any]]:
        return self.tables.select(ACTIVITY_LOGS, order="created_at", ascending=False, limit=ACTIVITY_LOG_LIMIT)

    def fetch_profile(self, user_id: str) -> dict[str, Any]:
        return self.tables.select_single(USERS, filters={"id": user_id})

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any] | None:
        rows = self.tables.insert(table, row)
        return rows[0] if rows else None

    def update(self, table: str, record_id: str, row: dict[str, Any]) -> dict[str, Any] | None:
        rows = self.tables.update(table, row, filters={"id": record_id})
        return rows[0] if rows else None

    def delete(self, table: str, record_id: str) -> None:
        self.tables.delete(table, filters={"id": record_id})
