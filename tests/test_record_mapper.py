from wms_control.app.domain.models.profile import Permission
from wms_control.app.infrastructure.sdk_adapter import record_mapper


def test_rack_products_come_from_join_with_defaults() -> None:
    row = {
        "id": "r1",
        "name": "R1",
        "capacity": 6,
        "line": "L1",
        "rack_products": [{"product_id": "p9", "floor": 3, "inbound_date": "2024-02-01", "outbound_date": None}],
    }

    rack = record_mapper.rack_from_row(row, products_by_id={})

    (product,) = rack.products
    assert rack.capacity == 6
    assert (product.id, product.code, product.weight, product.manufacturer) == ("p9", "N/A", 0, "N/A")
    assert product.inbound_at == "2024-02-01"
    assert record_mapper.rack_to_row({"name": "R1", "products": [product]}) == {"name": "R1"}


def test_product_code_category_column_and_storage_default() -> None:
    code = record_mapper.product_code_from_row({"id": "pc1", "code": "ICE", "category_id": "c1", "storage_temp": 0})

    assert code.category == "c1"
    assert code.storage_temp == -18.0
    assert record_mapper.product_code_to_row({"code": "ICE", "category": "c2", "created_at": "x"}) == {
        "code": "ICE",
        "category_id": "c2",
    }


def test_user_row_serializes_permissions_and_drops_unknown_columns() -> None:
    row = record_mapper.user_to_row(
        {"email": "ana@example.com", "password": "secret123", "permissions": [Permission("racks", view=True)]}
    )

    assert row == {"email": "ana@example.com", "permissions": [{"page": "racks", "view": True, "edit": False}]}
    user = record_mapper.user_from_row({"id": "u1", **row})
    assert user.permissions == (Permission("racks", view=True),)
    assert user.role == "viewer"


def test_quantity_is_first_integer_in_details_then_action() -> None:
    assert record_mapper.parse_quantity("moved 12 boxes, 3 left", "move") == 12
    assert record_mapper.parse_quantity(None, "picked 4") == 4
    assert record_mapper.parse_quantity("no digits", "none either") == 0


def test_stock_movement_from_activity_log() -> None:
    movement = record_mapper.stock_movement_from_row(
        {"id": "l1", "user_id": "u1", "rack_id": "r1", "action": "inbound", "details": "7 units", "created_at": "t"}
    )

    assert movement.type == "inbound"
    assert movement.quantity == 7
    assert movement.product_id == "N/A"
    assert movement.moved_at == "t"
