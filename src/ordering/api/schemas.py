"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands. JSON keys are camelCase, as the storefront and
till clients send them.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shared.order_view import NormalizedOrder


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Direct order submission
# ---------------------------------------------------------------------------
class DirectOrderItemSchema(CamelModel):
    """A submitted line. Legacy keys (title, quantity, price, total) pass through."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    name: str | None = None
    qty: int | None = Field(default=None, ge=1)
    unit_price: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    line_total: float | None = Field(default=None, ge=0, allow_inf_nan=False)


class ContactSchema(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    name: str | None = None
    email: str | None = None
    phone: str | None = None


class FulfilmentSchema(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    method: str | None = None
    address: str | None = None
    scheduled_for: str | None = None
    note: str | None = None
    contact: ContactSchema | None = None


class SubmitOrderRequest(CamelModel):
    order_id: str = Field(min_length=1, max_length=255)
    revenue: float = Field(ge=0, allow_inf_nan=False)
    cost: float = Field(default=0, ge=0, allow_inf_nan=False)
    date: str | None = None
    currency: str | None = Field(default=None, max_length=3)
    items: list[DirectOrderItemSchema] = Field(default_factory=list)
    customer: ContactSchema | None = None
    fulfilment: FulfilmentSchema | None = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "orderId": "COD-1",
                    "revenue": 2500,
                    "cost": 1500,
                    "items": [{"name": "Rice & Curry", "qty": 1, "unitPrice": 2500, "lineTotal": 2500}],
                    "customer": {"email": "c@z.com"},
                }
            ]
        },
    )


# ---------------------------------------------------------------------------
# Status and contact updates
# ---------------------------------------------------------------------------
class UpdateStatusRequest(CamelModel):
    order_id: str | None = None
    status: str | None = None
    email: str | None = None  # overrides every stored address for this notification


class SaveContactRequest(CamelModel):
    order_id: str | None = None
    email: str | None = None


class ResendNotificationRequest(CamelModel):
    email: str | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------
class LineItemResponse(CamelModel):
    name: str
    qty: int
    unit_price: float
    line_total: float


class CustomerResponse(CamelModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None


class FulfilmentResponse(CamelModel):
    method: str | None = None
    address: str | None = None
    scheduled_for: str | None = None
    note: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None


class OrderResponse(CamelModel):
    order_id: str
    status: str
    revenue: float
    cost: float
    date: str
    currency: str | None = None
    source: str | None = None
    items: list[LineItemResponse]
    customer: CustomerResponse
    fulfilment: FulfilmentResponse | None = None
    tracking_url: str | None = None

    @classmethod
    def from_normalized(cls, order: NormalizedOrder) -> "OrderResponse":
        fulfilment = order.fulfilment
        return cls(
            order_id=order.order_id,
            status=order.status,
            revenue=order.revenue,
            cost=order.cost,
            date=order.date,
            currency=order.currency,
            source=order.source,
            items=[
                LineItemResponse(
                    name=item.name,
                    qty=item.qty,
                    unit_price=item.unit_price,
                    line_total=item.line_total,
                )
                for item in order.items
            ],
            customer=CustomerResponse(
                name=order.customer.name,
                email=order.customer.email,
                phone=order.customer.phone,
            ),
            fulfilment=(
                FulfilmentResponse(
                    method=fulfilment.method,
                    address=fulfilment.address,
                    scheduled_for=fulfilment.scheduled_for,
                    note=fulfilment.note,
                    contact_name=fulfilment.contact_name,
                    contact_email=fulfilment.contact_email,
                    contact_phone=fulfilment.contact_phone,
                )
                if fulfilment
                else None
            ),
            tracking_url=order.tracking_url,
        )


class ConfirmOrderResponse(CamelModel):
    order: OrderResponse


class SubmitOrderResponse(CamelModel):
    order: OrderResponse
    created: bool


class OrderListResponse(CamelModel):
    orders: list[OrderResponse]


class NotificationResponse(CamelModel):
    status: str
    recipient: str | None = None
    reason: str | None = None


class StatusUpdateResponse(CamelModel):
    order_id: str
    status: str
    notification: NotificationResponse | None = None


class PublicStatusResponse(CamelModel):
    order_id: str
    status: str
    revenue: float
    cost: float
    date: str


class OkResponse(CamelModel):
    ok: bool = True
