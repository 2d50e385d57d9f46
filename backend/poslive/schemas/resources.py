"""Resource update schemas.

Every payload pushed by the store is validated into one member of a closed,
tagged union keyed by ``resource_type`` before it reaches the application
store. Field names accept both the store's camelCase and snake_case.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from poslive.core.exceptions import PayloadValidationError


class ResourceType(str, Enum):
    """Resource collections a screen can subscribe to."""

    ORDERS = "orders"
    TABLES = "tables"
    MENU_ITEMS = "menu_items"
    INVENTORY_ITEMS = "inventory_items"
    CUSTOMERS = "customers"
    STAFF = "staff"
    ATTENDANCE = "attendance"
    RECEIPTS = "receipts"


def resource_path(tenant_id: str, resource_type: ResourceType) -> str:
    """Store path of a resource collection for one restaurant."""
    return f"restaurants/{tenant_id}/{resource_type.value}"


class ResourceUpdateBase(BaseModel):
    """Fields shared by every resource update."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    id: str
    restaurant_id: Optional[str] = Field(None, alias="restaurantId")
    deleted: bool = False
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class OrderUpdate(ResourceUpdateBase):
    """Order document change."""

    resource_type: Literal["orders"] = "orders"
    status: Optional[str] = None
    table_id: Optional[str] = Field(None, alias="tableId")
    total: Optional[float] = None
    items: list[dict[str, Any]] = Field(default_factory=list)


class TableUpdate(ResourceUpdateBase):
    """Table document change."""

    resource_type: Literal["tables"] = "tables"
    name: Optional[str] = None
    status: Optional[str] = None
    seats: Optional[int] = None


class MenuItemUpdate(ResourceUpdateBase):
    """Menu item document change."""

    resource_type: Literal["menu_items"] = "menu_items"
    name: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    available: bool = Field(True, alias="isAvailable")


class InventoryItemUpdate(ResourceUpdateBase):
    """Inventory item document change."""

    resource_type: Literal["inventory_items"] = "inventory_items"
    name: Optional[str] = None
    quantity: Optional[float] = None
    unit: Optional[str] = None


class CustomerUpdate(ResourceUpdateBase):
    """Customer document change."""

    resource_type: Literal["customers"] = "customers"
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class StaffMemberUpdate(ResourceUpdateBase):
    """Staff member document change."""

    resource_type: Literal["staff"] = "staff"
    name: Optional[str] = None
    role: Optional[str] = None


class AttendanceRecordUpdate(ResourceUpdateBase):
    """Attendance record document change."""

    resource_type: Literal["attendance"] = "attendance"
    staff_id: Optional[str] = Field(None, alias="staffId")
    status: Optional[str] = None
    clock_in: Optional[datetime] = Field(None, alias="clockIn")
    clock_out: Optional[datetime] = Field(None, alias="clockOut")


class ReceiptUpdate(ResourceUpdateBase):
    """Receipt document change."""

    resource_type: Literal["receipts"] = "receipts"
    order_id: Optional[str] = Field(None, alias="orderId")
    total: Optional[float] = None


ResourceUpdate = Annotated[
    Union[
        OrderUpdate,
        TableUpdate,
        MenuItemUpdate,
        InventoryItemUpdate,
        CustomerUpdate,
        StaffMemberUpdate,
        AttendanceRecordUpdate,
        ReceiptUpdate,
    ],
    Field(discriminator="resource_type"),
]

_resource_update_adapter: TypeAdapter[ResourceUpdate] = TypeAdapter(ResourceUpdate)


def parse_resource_update(resource_type: ResourceType, payload: Any) -> ResourceUpdate:
    """Validate a raw store payload as an update of ``resource_type``.

    The tag is taken from the subscription, never from the payload, so a
    document cannot claim to be a different resource than the one it was
    delivered on.

    Raises:
        PayloadValidationError: If the payload is not a mapping or fails validation.
    """
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(by_alias=True)
    if not isinstance(payload, dict):
        raise PayloadValidationError(
            resource_type.value,
            [{"type": "dict_type", "msg": f"Expected a mapping, got {type(payload).__name__}"}],
        )

    try:
        return _resource_update_adapter.validate_python(
            {**payload, "resource_type": resource_type.value}
        )
    except ValidationError as e:
        raise PayloadValidationError(resource_type.value, e.errors()) from e
