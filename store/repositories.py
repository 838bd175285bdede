"""
Purpose: The query/update interface the core depends on.
What it does:
Declares the two repositories injected into the authenticator, the lookup and
the state machine. Any store that can answer these three questions satisfies
the core:

- agents by phone number
- newest open order for an agent, with customer / store / product joined
- set the status of one order

Rule: No HTTP, no SQL here. Adapters live in store.postgrest / store.memory.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from agents.models import Agent
from orders.models import Order, OrderStatus


class AgentRepository(Protocol):

    def find_by_phone(self, phone_number: str, limit: int = 2) -> List[Agent]:
        """
        Agents whose phone_number equals the input, at most `limit` rows.
        Raises AgentQueryError on store failure.
        """
        ...


class OrderRepository(Protocol):

    def find_latest_open(self, agent_id: str, statuses: Sequence[OrderStatus]) -> Optional[Order]:
        """
        Newest (created_at desc) order for the agent whose status is in
        `statuses`, with references resolved. None when nothing matches.
        Raises OrderQueryError on store failure.
        """
        ...

    def update_status(self, order_id: str, status: OrderStatus) -> None:
        """
        Set `status` (and nothing else) on one order.
        Raises UpdateError on store failure or when no row matched.
        """
        ...
