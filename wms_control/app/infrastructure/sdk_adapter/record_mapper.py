from __future__ import annotations

import re
from typing import Any

from wms_control.app.domain.models.profile import Permission
from wms_control.app.domain.models.records import (
    DEFAULT_RACK_CAPACITY,
    DEFAULT_STORAGE_TEMP,
    Category,
    Product,
    ProductCode,
    Rack,
    StockMovement,
    UserRecord,
)

RACK_COLUMNS = "*,rack_products(product_id,floor,inbound_date,outbound_date)"
_FIRST_INTEGER = re.compile(r"\d+")
_PRODUCT_COLUMNS = ("code", "inbound_at", "outbound_at", "weight", "manufacturer", "floor")
_RACK_COLUMNS = ("name", "capacity", "line")
_USER_COLUMNS = ("email", "name", "role", "status", "permissions")


def product_from_row(row: dict[str, Any]) -> Product:
    return Product.from_payload(row)


def product_to_row(values: dict[str, Any]) -> dict[str, Any]:
    return {key: values[key] for key in _PRODUCT_COLUMNS if key in values}


def rack_from_row(row: dict[str, Any], products_by_id: dict[str, dict[str, Any]]) -> Rack:
    placed: list[Product] = []
    for link in row.get("rack_products") or []:
        product_id = str(link.get("product_id", ""))
        detail = products_by_id.get(product_id) or {}
        placed.append(
            Product(
                id=product_id,
                code=detail.get("code") or "N/A",
                inbound_at=link.get("inbound_date"),
                outbound_at=link.get("outbound_date"),
                weight=detail.get("weight") or 0,
                manufacturer=detail.get("manufacturer") or "N/A",
                floor=link.get("floor"),
            )
        )
    return Rack(
        id=str(row.get("id", "")),
        name=str(row.get("name") or ""),
        capacity=int(row.get("capacity") or DEFAULT_RACK_CAPACITY),
        line=str(row.get("line") or ""),
        products=tuple(placed),
    )


def rack_to_row(values: dict[str, Any]) -> dict[str, Any]:
    # products is derived from rack_products and is not a racks column.
    return {key: values[key] for key in _RACK_COLUMNS if key in values}


def category_from_row(row: dict[str, Any]) -> Category:
    return Category.from_payload(row)


def category_to_row(values: dict[str, Any]) -> dict[str, Any]:
    return {"name": values["name"]} if "name" in values else {}


def product_code_from_row(row: dict[str, Any]) -> ProductCode:
    storage_temp = row.get("storage_temp")
    return ProductCode(
        id=str(row.get("id", "")),
        code=str(row.get("code") or ""),
        name=str(row.get("name") or ""),
        description=str(row.get("description") or ""),
        category=row.get("category_id"),
        storage_temp=storage_temp if storage_temp not in (None, "", 0) else DEFAULT_STORAGE_TEMP,
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def product_code_to_row(values: dict[str, Any]) -> dict[str, Any]:
    row = {key: values[key] for key in ("code", "name", "description", "storage_temp") if key in values}
    if "category" in values:
        row["category_id"] = values["category"]
    return row


def user_from_row(row: dict[str, Any]) -> UserRecord:
    return UserRecord(
        id=str(row.get("id", "")),
        email=str(row.get("email") or ""),
        name=str(row.get("name") or ""),
        role=str(row.get("role") or "viewer"),
        status=str(row.get("status") or "active"),
        permissions=tuple(
            Permission.from_payload(entry) for entry in row.get("permissions") or [] if isinstance(entry, dict)
        ),
    )


def user_to_row(values: dict[str, Any]) -> dict[str, Any]:
    row = {key: values[key] for key in _USER_COLUMNS if key in values}
    if "permissions" in row:
        row["permissions"] = [
            entry.to_payload() if isinstance(entry, Permission) else dict(entry) for entry in row["permissions"]
        ]
    return row


def parse_quantity(details: str | None, action: str | None) -> int:
    for text in (details, action):
        match = _FIRST_INTEGER.search(text or "")
        if match:
            return int(match.group(0))
    return 0


def stock_movement_from_row(row: dict[str, Any]) -> StockMovement:
    return StockMovement(
        id=str(row.get("id", "")),
        user_id=row.get("user_id"),
        product_id=str(row.get("product_id") or "N/A"),
        rack_id=row.get("rack_id"),
        type=str(row.get("action") or ""),
        quantity=parse_quantity(row.get("details"), row.get("action")),
        moved_at=row.get("created_at"),
        details=row.get("details") or row.get("action"),
    )
