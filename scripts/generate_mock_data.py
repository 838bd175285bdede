import os
import uuid
from datetime import datetime, timezone, timedelta

import numpy as np
import pandas as pd

SWEETS = [
    ("Kaju Katli", "Classic"),
    ("Mysore Pak", "Ghee"),
    ("Rasgulla", "Tinned"),
    ("Gulab Jamun", "Dry"),
    ("Soan Papdi", "Elaichi"),
]

def generate_mock_data(num_agents=20, num_stores=8, num_customers=200, num_orders=60, output_dir="sampledata"):
    """
    Generates a small store snapshot (agents, stores, customers, products, orders)
    that scripts/run_dispatch_simulation.py loads into the in-memory store.
    Some agents get no order and a few customers have no coordinates so the
    empty-task and degraded-ETA paths show up in the simulation.
    """
    # Center around Bengaluru
    CENTER_LAT = 12.9716
    CENTER_LON = 77.5946

    os.makedirs(output_dir, exist_ok=True)
    now = datetime.now(timezone.utc)

    agents = pd.DataFrame({
        "agent_id": [f"A{101 + index}" for index in range(num_agents)],
        "phone_number": [f"98765{str(index).zfill(5)}" for index in range(num_agents)],
    })

    # Stores placed within ~5km of the centre (roughly 0.05 degrees)
    stores = pd.DataFrame({
        "store_id": [f"s_{str(uuid.uuid4())[:8]}" for _ in range(num_stores)],
        "location_name": [f"mishTee Outlet {index + 1}" for index in range(num_stores)],
        "lat": np.round(CENTER_LAT + np.random.uniform(-0.05, 0.05, num_stores), 6),
        "lon": np.round(CENTER_LON + np.random.uniform(-0.05, 0.05, num_stores), 6),
    })

    customer_lat = np.round(CENTER_LAT + np.random.uniform(-0.1, 0.1, num_customers), 6)
    customer_lon = np.round(CENTER_LON + np.random.uniform(-0.1, 0.1, num_customers), 6)
    # ~5% of customers were onboarded without a pin
    missing = np.random.random(num_customers) < 0.05
    customer_lat[missing] = np.nan
    customer_lon[missing] = np.nan
    customers = pd.DataFrame({
        "customer_id": [f"c_{index + 1000}" for index in range(num_customers)],
        "full_name": [f"Customer {index + 1}" for index in range(num_customers)],
        "delivery_address": [f"{np.random.randint(1, 300)} Main Road, Bengaluru" for _ in range(num_customers)],
        "lat": customer_lat,
        "lon": customer_lon,
    })

    products = pd.DataFrame({
        "product_id": [f"p_{index + 1}" for index in range(len(SWEETS))],
        "sweet_name": [name for name, _ in SWEETS],
        "variant_type": [variant for _, variant in SWEETS],
    })

    # Orders go to the first two thirds of the agents so the rest log in to an empty queue
    busy_agents = agents["agent_id"].head(max(1, (num_agents * 2) // 3)).to_numpy()
    orders = pd.DataFrame({
        "order_id": [f"o_{str(index + 1).zfill(6)}" for index in range(num_orders)],
        "status": np.random.choice(["Pending", "Assigned", "Out for Delivery", "Delivered"], num_orders, p=[0.5, 0.25, 0.1, 0.15]),
        "agent_id": np.random.choice(busy_agents, num_orders),
        "customer_ref": np.random.choice(customers["customer_id"].to_numpy(), num_orders),
        "store_ref": np.random.choice(stores["store_id"].to_numpy(), num_orders),
        "product_ref": np.random.choice(products["product_id"].to_numpy(), num_orders),
        "qty_kg": np.round(np.random.uniform(0.25, 5.0, num_orders), 2),
        "order_value_inr": np.round(np.random.uniform(150, 4000, num_orders), 2),
        "created_at": [(now - timedelta(minutes=int(minutes))).isoformat() for minutes in np.random.randint(0, 600, num_orders)],
    })

    for name, frame in [("agents", agents), ("stores", stores), ("customers", customers), ("products", products), ("orders", orders)]:
        frame.to_csv(os.path.join(output_dir, f"{name}.csv"), index=False)

    print(f"✅ Generated {num_agents} agents, {num_orders} orders and reference data into '{output_dir}/'")

    # Print a quick preview of how many agents hold more than one open order
    open_orders = orders[orders["status"] != "Delivered"]
    stacked = open_orders["agent_id"].value_counts()
    print(f"\nAgents with stacked open orders (only the newest is served): {int((stacked > 1).sum())}")

if __name__ == "__main__":
    generate_mock_data()
