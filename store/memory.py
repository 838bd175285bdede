"""
Purpose: In-memory store that satisfies both repositories.
What it does:
Holds agents / customers / stores / products / orders in dicts and answers the
same three questions as the PostgREST adapter. Used as the test double and by
scripts/run_dispatch_simulation.py.

Failures can be injected per operation to exercise the error paths.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from agents.models import Agent
from orders.models import Customer, Order, OrderStatus, Product, Store

from .errors import AgentQueryError, OrderQueryError, UpdateError


@dataclass
class InMemoryStore:
    agents: Dict[str, Agent] = field(default_factory=dict)
    customers: Dict[str, Customer] = field(default_factory=dict)
    stores: Dict[str, Store] = field(default_factory=dict)
    products: Dict[str, Product] = field(default_factory=dict)
    orders: Dict[str, Order] = field(default_factory=dict)

    #injected failures: operation name -> error message
    failures: Dict[str, str] = field(default_factory=dict)

    #every status write, in order: (order_id, status)
    updates: List[Tuple[str, OrderStatus]] = field(default_factory=list)

    # --- Seeding ---

    def add_agent(self, agent: Agent) -> Agent:
        self.agents[agent.agent_id] = agent
        return agent

    def add_order(self, order: Order) -> Order:
        """
        Store the bare row. References are resolved at read time, like a join.
        """
        self.orders[order.order_id] = replace(order, customer=None, store=None, product=None)
        return order

    def fail(self, operation: str, message: str = "store unavailable") -> None:
        self.failures[operation] = message

    def recover(self, operation: str) -> None:
        self.failures.pop(operation, None)

    # --- AgentRepository ---

    def find_by_phone(self, phone_number: str, limit: int = 2) -> List[Agent]:
        if "find_by_phone" in self.failures:
            raise AgentQueryError(self.failures["find_by_phone"])
        matches = [agent for agent in self.agents.values() if agent.phone_number == phone_number]
        return matches[:limit]

    # --- OrderRepository ---

    def find_latest_open(self, agent_id: str, statuses: Sequence[OrderStatus]) -> Optional[Order]:
        if "find_latest_open" in self.failures:
            raise OrderQueryError(self.failures["find_latest_open"])

        candidates = [
            order for order in self.orders.values()
            if order.agent_id == agent_id and order.status in statuses
        ]
        if not candidates:
            return None

        newest = max(candidates, key=lambda order: order.created_at or datetime.min)
        return self._joined(newest)

    def update_status(self, order_id: str, status: OrderStatus) -> None:
        if "update_status" in self.failures:
            raise UpdateError(self.failures["update_status"])
        if order_id not in self.orders:
            raise UpdateError(f"Status update for order {order_id} matched no row")

        self.orders[order_id] = replace(self.orders[order_id], status=status)
        self.updates.append((order_id, status))

    def _joined(self, order: Order) -> Order:
        return replace(
            order,
            customer=self.customers.get(order.customer_ref),
            store=self.stores.get(order.store_ref),
            product=self.products.get(order.product_ref),
        )
