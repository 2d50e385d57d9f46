"""Schemas for poslive."""

from poslive.schemas.resources import (
    AttendanceRecordUpdate,
    CustomerUpdate,
    InventoryItemUpdate,
    MenuItemUpdate,
    OrderUpdate,
    ReceiptUpdate,
    ResourceType,
    ResourceUpdate,
    StaffMemberUpdate,
    TableUpdate,
    parse_resource_update,
    resource_path,
)

__all__ = [
    "AttendanceRecordUpdate",
    "CustomerUpdate",
    "InventoryItemUpdate",
    "MenuItemUpdate",
    "OrderUpdate",
    "ReceiptUpdate",
    "ResourceType",
    "ResourceUpdate",
    "StaffMemberUpdate",
    "TableUpdate",
    "parse_resource_update",
    "resource_path",
]
