"""
Purpose: Find the courier's current active order.
What it does:
Asks the order repository for the newest order linked to the agent (by
agent_id) whose status is still open, with customer / store / product
resolved in the same call.

- zero matches is a normal outcome and returns None
- store failures propagate as OrderQueryError
- if an agent somehow has several open orders, only the newest is returned
  and the older ones are ignored (not reported)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from .models import OPEN_STATUSES, Order

if TYPE_CHECKING:
    from agents.models import Agent
    from store.repositories import OrderRepository

logger = logging.getLogger(__name__)


def find_active_order(agent: Agent, orders: OrderRepository) -> Optional[Order]:
    order = orders.find_latest_open(agent.agent_id, OPEN_STATUSES)

    if order is None:
        logger.info("No active order for agent %s", agent.agent_id)
        return None

    logger.info("Agent %s active order %s (%s)", agent.agent_id, order.order_id, order.status.value)
    return order
