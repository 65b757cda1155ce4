from __future__ import annotations

from collections.abc import Callable
from typing import Any

from clients.wms_backend_sdk.http_client import HttpClient
from clients.wms_backend_sdk.realtime import ChangeEvent, ChangeFeed

REST_PREFIX = "/rest/v1"
_RETURN_REPRESENTATION = {"Prefer": "return=representation"}
_SINGLE_OBJECT = {"Accept": "application/vnd.pgrst.object+json"}


class TableClient:
    def __init__(
        self,
        http_client: HttpClient,
        token_provider: Callable[[], str | None] | None = None,
        change_feed: ChangeFeed | None = None,
    ) -> None:
        self.http_client = http_client
        self._token_provider = token_provider or (lambda: None)
        self.change_feed = change_feed

    def select(
        self,
        table: str,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        ascending: bool = True,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params = _build_params(columns=columns, filters=filters, order=order, ascending=ascending, limit=limit)
        payload = self.http_client.request("GET", f"{REST_PREFIX}/{table}", token=self._token_provider(), params=params)
        return _rows(payload)

    def select_single(self, table: str, filters: dict[str, Any], columns: str = "*") -> dict[str, Any]:
        params = _build_params(columns=columns, filters=filters)
        return self.http_client.request(
            "GET",
            f"{REST_PREFIX}/{table}",
            token=self._token_provider(),
            params=params,
            headers=dict(_SINGLE_OBJECT),
        )

    def insert(self, table: str, rows: dict[str, Any] | list[dict[str, Any]]) -> list[dict[str, Any]]:
        body = rows if isinstance(rows, list) else [rows]
        payload = self.http_client.request(
            "POST",
            f"{REST_PREFIX}/{table}",
            token=self._token_provider(),
            json_body=body,
            headers=dict(_RETURN_REPRESENTATION),
        )
        inserted = _rows(payload)
        for record in inserted:
            self._publish(table, "INSERT", record=record)
        return inserted

    def update(self, table: str, values: dict[str, Any], filters: dict[str, Any]) -> list[dict[str, Any]]:
        payload = self.http_client.request(
            "PATCH",
            f"{REST_PREFIX}/{table}",
            token=self._token_provider(),
            json_body=values,
            params=_build_params(filters=filters),
            headers=dict(_RETURN_REPRESENTATION),
        )
        updated = _rows(payload)
        for record in updated:
            self._publish(table, "UPDATE", record=record)
        return updated

    def delete(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        payload = self.http_client.request(
            "DELETE",
            f"{REST_PREFIX}/{table}",
            token=self._token_provider(),
            params=_build_params(filters=filters),
            headers=dict(_RETURN_REPRESENTATION),
        )
        deleted = _rows(payload)
        for record in deleted:
            self._publish(table, "DELETE", old_record=record)
        return deleted

    def _publish(self, table: str, event: str, record: dict | None = None, old_record: dict | None = None) -> None:
        if self.change_feed is None:
            return
        self.change_feed.publish(ChangeEvent(table=table, event=event, record=record or {}, old_record=old_record or {}))


def _build_params(
    columns: str | None = None,
    filters: dict[str, Any] | None = None,
    order: str | None = None,
    ascending: bool = True,
    limit: int | None = None,
) -> dict[str, Any]:
    params: dict[str, Any] = {}
    if columns:
        params["select"] = columns
    for column, value in (filters or {}).items():
        params[column] = "is.null" if value is None else f"eq.{_filter_value(value)}"
    if order:
        params["order"] = f"{order}.{'asc' if ascending else 'desc'}"
    if limit is not None:
        params["limit"] = int(limit)
    return params


def _filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _rows(payload: dict[str, Any]) -> list[dict[str, Any]]:
    rows = payload.get("data")
    if isinstance(rows, list):
        return [row for row in rows if isinstance(row, dict)]
    if payload:
        return [payload]
    return []
