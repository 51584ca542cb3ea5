"""Pydantic schemas for client-originated socket events.

Fields use the camelCase names the browser sends. Nothing is required at
the schema level: which fields are mandatory (and what counts as
"missing") is decided by the namespace handlers, which treat empty values
like absent ones.
"""

from typing import Any

from pydantic import BaseModel, Field


class _ClientEvent(BaseModel):
    model_config = {"populate_by_name": True}


class OrderStatusUpdate(_ClientEvent):
    order_id: Any = Field(None, alias="orderId")
    status: Any = None
    payment_status: Any = Field(None, alias="paymentStatus")

    def is_complete(self) -> bool:
        return bool(self.order_id) and bool(self.status)


class OrderNew(_ClientEvent):
    order_id: Any = Field(None, alias="orderId")
    order_number: Any = Field(None, alias="orderNumber")
    customer_name: Any = Field(None, alias="customerName")
    total: Any = None


class NotificationSend(_ClientEvent):
    user_id: Any = Field(None, alias="userId")
    message: Any = None
    type: Any = None

    def is_complete(self) -> bool:
        return bool(self.user_id) and bool(self.message)


class Typing(_ClientEvent):
    room_id: Any = Field(None, alias="roomId")
