"""
Purpose: Repositories backed by the Supabase / PostgREST store.
What it does:
Translates the three store questions into PostgREST requests:

- GET   /rest/v1/agents?phone_number=eq.<phone>&limit=2
- GET   /rest/v1/orders?select=<order + embedded refs>&agent_id=eq.<id>
        &status=in.(...)&order=created_at.desc&limit=1
- PATCH /rest/v1/orders?order_id=eq.<id>   {"status": "<status>"}

and maps client failures onto the store error taxonomy.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from agents.models import Agent
from orders.models import Order, OrderStatus

from .errors import AgentQueryError, OrderQueryError, StoreRequestError, UpdateError
from .postgrest_client import PostgrestClient

logger = logging.getLogger(__name__)

# Orders join their references through customer_ref / store_ref / product_ref.
# Aliases keep the embedded keys stable (customer, store, product) for Order.from_row.
ORDER_SELECT = ",".join([
    "order_id",
    "status",
    "agent_id",
    "customer_ref",
    "store_ref",
    "product_ref",
    "qty_kg",
    "order_value_inr",
    "created_at",
    "customer:customers!customer_ref(full_name,delivery_address,lat,lon)",
    "store:stores!store_ref(location_name,lat,lon)",
    "product:products!product_ref(sweet_name,variant_type)",
])


def in_filter(statuses: Sequence[OrderStatus]) -> str:
    """PostgREST `in` filter; values are quoted because of the space in 'Out for Delivery'."""
    return "in.(" + ",".join(f'"{status.value}"' for status in statuses) + ")"


class PostgrestAgentRepository:

    def __init__(self, client: PostgrestClient):
        self.client = client

    def find_by_phone(self, phone_number: str, limit: int = 2) -> List[Agent]:
        try:
            rows = self.client.select("agents", {
                "select": "*",
                "phone_number": f"eq.{phone_number}",
                "limit": str(limit),
            })
        except StoreRequestError as e:
            raise AgentQueryError(f"Agent lookup failed: {e}") from e

        try:
            return [Agent.from_row(row) for row in rows]
        except (KeyError, TypeError) as e:
            raise AgentQueryError(f"Malformed agent row: {e}") from e


class PostgrestOrderRepository:

    def __init__(self, client: PostgrestClient):
        self.client = client

    def find_latest_open(self, agent_id: str, statuses: Sequence[OrderStatus]) -> Optional[Order]:
        try:
            rows = self.client.select("orders", {
                "select": ORDER_SELECT,
                "agent_id": f"eq.{agent_id}",
                "status": in_filter(statuses),
                "order": "created_at.desc",
                "limit": "1",
            })
        except StoreRequestError as e:
            raise OrderQueryError(f"Active order query failed: {e}") from e

        if not rows:
            return None

        try:
            return Order.from_row(rows[0])
        except (KeyError, ValueError) as e:
            #a row we cannot read is a query failure, not an empty result
            raise OrderQueryError(f"Malformed order row: {e}") from e

    def update_status(self, order_id: str, status: OrderStatus) -> None:
        try:
            rows = self.client.update("orders", {"order_id": f"eq.{order_id}"}, {"status": status.value})
        except StoreRequestError as e:
            raise UpdateError(f"Status update for order {order_id} failed: {e}") from e

        if not rows:
            raise UpdateError(f"Status update for order {order_id} matched no row")
        logger.info("Order %s -> %s", order_id, status.value)
