"""
Purpose: Domain models for the Orders capability.
What it does:
- Defines core data structures:
- Order (order_id, status, agent link, reference keys, qty, value, created_at)
- Customer / Store / Product reference data, resolved eagerly with the order

Defines enums/constants:
- OrderStatus = Pending | Assigned | Out for Delivery | Delivered
- OPEN_STATUSES (the "active" set used by the lookup)

The status values are the exact strings stored in the external store, they are
matched by value there so casing and spacing matter.

Rule: No store calls, no transition logic. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

LatLon = Tuple[float, float]

DEFAULT_CUSTOMER_NAME = "Valued Customer"


class OrderStatus(str, Enum):
    PENDING = "Pending"
    ASSIGNED = "Assigned"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"


OPEN_STATUSES: Tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.ASSIGNED,
    OrderStatus.OUT_FOR_DELIVERY,
)


@dataclass(frozen=True)
class Customer:
    full_name: Optional[str]
    delivery_address: Optional[str]
    lat: Optional[float] = None
    lon: Optional[float] = None

    @property
    def display_name(self) -> str:
        return (self.full_name or "").strip() or DEFAULT_CUSTOMER_NAME

    @property
    def coordinates(self) -> LatLon:
        return (self.lat, self.lon)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Customer:
        return cls(
            full_name=row.get("full_name"),
            delivery_address=row.get("delivery_address"),
            lat=_as_float(row.get("lat")),
            lon=_as_float(row.get("lon")),
        )


@dataclass(frozen=True)
class Store:
    location_name: Optional[str]
    lat: Optional[float] = None
    lon: Optional[float] = None

    @property
    def coordinates(self) -> LatLon:
        return (self.lat, self.lon)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Store:
        return cls(
            location_name=row.get("location_name"),
            lat=_as_float(row.get("lat")),
            lon=_as_float(row.get("lon")),
        )


@dataclass(frozen=True)
class Product:
    sweet_name: Optional[str]
    variant_type: Optional[str] = None

    @property
    def label(self) -> str:
        if self.variant_type:
            return f"{self.sweet_name} ({self.variant_type})"
        return self.sweet_name or ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Product:
        return cls(
            sweet_name=row.get("sweet_name"),
            variant_type=row.get("variant_type"),
        )


@dataclass(frozen=True)
class Order:
    """
    A fully navigable order: one lookup call returns the row together with its
    customer, store and product, so nothing downstream needs a follow-up fetch.

    Orders link to agents through agent_id.
    """

    order_id: str
    status: OrderStatus
    agent_id: str
    customer_ref: Optional[str] = None
    store_ref: Optional[str] = None
    product_ref: Optional[str] = None
    qty_kg: Optional[float] = None
    order_value_inr: Optional[float] = None
    created_at: Optional[datetime] = None

    #eagerly joined reference data
    customer: Optional[Customer] = None
    store: Optional[Store] = None
    product: Optional[Product] = None

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Order:
        """
        Build an Order from a store row. Embedded references arrive under the
        keys customer / store / product (PostgREST aliases them that way).
        """
        customer = row.get("customer")
        store = row.get("store")
        product = row.get("product")
        return cls(
            order_id=str(row["order_id"]),
            status=OrderStatus(row["status"]),
            agent_id=str(row["agent_id"]),
            customer_ref=row.get("customer_ref"),
            store_ref=row.get("store_ref"),
            product_ref=row.get("product_ref"),
            qty_kg=_as_float(row.get("qty_kg")),
            order_value_inr=_as_float(row.get("order_value_inr")),
            created_at=_as_datetime(row.get("created_at")),
            customer=Customer.from_row(customer) if customer else None,
            store=Store.from_row(store) if store else None,
            product=Product.from_row(product) if product else None,
        )


def _as_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    # PostgREST timestamps: 2024-05-01T10:15:00.12345+00:00, trailing zeros of the
    # fraction trimmed (or a trailing Z); fromisoformat accepts both from 3.11
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
