"""
Purpose: Package entry + stable exports.
What it does:

Marks orders as a Python package and re-exports the public API so other
modules can do:

from orders import Order, OrderStatus, find_active_order

Should not contain business logic.

Public API:
- Domain models: Order, Customer, Store, Product, OrderStatus, OPEN_STATUSES
- Lookup entry: find_active_order
"""
from .models import Order, Customer, Store, Product, OrderStatus, OPEN_STATUSES
from .lookup import find_active_order

__all__ = ["Order",
           "Customer",
             "Store",
               "Product",
               "OrderStatus"
               , "OPEN_STATUSES"
               , "find_active_order"
               ]
