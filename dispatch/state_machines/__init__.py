from .order_state import OrderStateException, TRANSITIONS, advance, can_transition

__all__ = ["OrderStateException", "TRANSITIONS", "advance", "can_transition"]
