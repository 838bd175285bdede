import csv
import os
import random
from typing import Optional

import pandas as pd

from agents.models import Agent
from dispatch.session import DispatchSession, SessionView
from dispatch.signature_capture import SignaturePad
from orders.models import Customer, Order, OrderStatus, Product, Store
from store.memory import InMemoryStore

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class MockNavigator:
    def __init__(self):
        self.opened = []

    def __call__(self, url):
        self.opened.append(url) # Silently record the directions links for the output later.


def _clean(value) -> Optional[object]:
    # pandas reads blank cells as NaN
    return None if pd.isna(value) else value


def load_store(data_dir="sampledata") -> InMemoryStore:
    data_dir = os.path.join(BASE_DIR, data_dir)
    store = InMemoryStore()

    for _, row in pd.read_csv(os.path.join(data_dir, "agents.csv"), dtype=str).iterrows():
        store.add_agent(Agent.from_row(row))

    for _, row in pd.read_csv(os.path.join(data_dir, "stores.csv")).iterrows():
        store.stores[row["store_id"]] = Store(row["location_name"], _clean(row["lat"]), _clean(row["lon"]))

    for _, row in pd.read_csv(os.path.join(data_dir, "customers.csv")).iterrows():
        store.customers[row["customer_id"]] = Customer(
            row["full_name"], row["delivery_address"], _clean(row["lat"]), _clean(row["lon"])
        )

    for _, row in pd.read_csv(os.path.join(data_dir, "products.csv")).iterrows():
        store.products[row["product_id"]] = Product(row["sweet_name"], row["variant_type"])

    for _, row in pd.read_csv(os.path.join(data_dir, "orders.csv"), dtype={"agent_id": str}).iterrows():
        store.add_order(Order.from_row({key: _clean(value) for key, value in row.items()}))

    return store


def sign(session: DispatchSession) -> None:
    # A short zig-zag is enough ink to pass the PoD gate
    pad = session.signature.pad
    session.signature.begin((10, pad.height // 2))
    for step in range(1, 6):
        pad.move((10 + step * 20, pad.height // 2 + (15 if step % 2 else -15)))
    pad.release()


def run_simulation(data_dir="sampledata", seed=7):
    print("=== STARTING MITRA DISPATCH SIMULATION ===")

    # 1. Load Data
    store = load_store(data_dir)
    print(f"Loaded {len(store.agents)} Agents and {len(store.orders)} Orders.\n")

    rng = random.Random(seed)
    output_path = os.path.join(BASE_DIR, "dispatch_results.csv")
    delivered = 0

    with open(output_path, "w", newline='') as file:
        writer = csv.writer(file)
        writer.writerow(["agent_id", "order_id", "customer", "distance_km", "eta_min", "congestion", "outcome"])

        # 2. Each agent works their queue until nothing is open
        for agent in store.agents.values():
            navigator = MockNavigator()
            session = DispatchSession(store, store, pad=SignaturePad(), navigator=navigator, rng=rng)

            result = session.login(agent.phone_number)
            if not result.ok:
                print(f"[FAILED] {agent.agent_id} login: {result.message}")
                continue

            while session.view == SessionView.ACTIVE:
                order = session.order
                summary = session.route_summary()
                customer = order.customer.display_name if order.customer else "Valued Customer"

                if order.status != OrderStatus.OUT_FOR_DELIVERY:
                    session.start_delivery()
                sign(session)
                outcome = session.confirm_delivery()

                writer.writerow([
                    agent.agent_id,
                    order.order_id,
                    customer,
                    summary.distance_km if summary.has_coordinates else "N/A",
                    summary.eta_minutes,
                    summary.congestion_level,
                    "DELIVERED" if outcome.ok else outcome.error,
                ])
                if not outcome.ok:
                    print(f"[FAILED] {order.order_id}: {outcome.message}")
                    break

                delivered += 1
                print(f"[SUCCESS] {agent.agent_id} delivered {order.order_id} to {customer} "
                      f"({summary.distance_km} km, ~{summary.eta_minutes} min)")

                # explicit "next task", never automatic
                session.next_task()

            if session.view == SessionView.IDLE and not navigator.opened:
                print(f"[IDLE] {agent.agent_id}: no active tasks found.")

    print("\n=== SIMULATION COMPLETE ===")
    print(f"Orders Delivered: {delivered}")
    print(f"Status writes issued: {len(store.updates)}")
    print(f"Results written to '{output_path}'.")

if __name__ == "__main__":
    run_simulation()
