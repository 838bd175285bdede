from datetime import datetime, timedelta

import pytest

from agents.models import Agent
from orders.models import Customer, Order, OrderStatus, Product, Store
from store.memory import InMemoryStore

BASE_TIME = datetime(2024, 5, 1, 10, 0, 0)


def make_order(order_id, status=OrderStatus.PENDING, agent_id="A101", minutes=0, **overrides):
    fields = dict(
        order_id=order_id,
        status=status,
        agent_id=agent_id,
        customer_ref="c_1",
        store_ref="s_1",
        product_ref="p_1",
        qty_kg=1.5,
        order_value_inr=850.0,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )
    fields.update(overrides)
    return Order(**fields)


@pytest.fixture
def memory_store():
    # Example: one courier in Bengaluru with a single pending order
    store = InMemoryStore()
    store.add_agent(Agent(agent_id="A101", phone_number="9876500000"))
    store.add_agent(Agent(agent_id="A102", phone_number="9876500001"))
    store.stores["s_1"] = Store("mishTee Jayanagar", 12.90, 77.60)
    store.customers["c_1"] = Customer("Asha Rao", "14 MG Road, Bengaluru", 12.95, 77.65)
    store.products["p_1"] = Product("Kaju Katli", "Classic")
    store.add_order(make_order("o_000001"))
    return store


@pytest.fixture
def agent():
    return Agent(agent_id="A101", phone_number="9876500000")
