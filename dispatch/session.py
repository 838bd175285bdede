"""
Purpose: Orchestrator for one courier device (the "glue").
What it does:
Holds the logged-in agent, the current order, the congestion level sampled for
that order and the signature pad, and drives the view the presentation layer
renders:

LOGIN -> LOADING -> ACTIVE | IDLE -> ... -> DONE -> (next task) -> LOADING ...

It owns no business rules: login is agents.authenticate, lookup is
orders.find_active_order, transitions are dispatch.state_machines.advance and
the distance / ETA numbers come from routing. The only rule enforced here is
the PoD gate: Delivered needs a non-empty signature.

Every operation returns a SessionResult instead of raising, so the
presentation decides how to show failures. Nothing is retried here; the
courier re-invokes the action.
"""

from __future__ import annotations

import logging
import random
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional

from agents.authenticator import AgentLookupAmbiguous, AgentNotFound, authenticate
from agents.models import Agent
from orders.lookup import find_active_order
from orders.models import Order, OrderStatus
from routing.eta_service import distance_km, estimate_eta, sample_congestion
from routing.maps_links import directions_url, preview_embed_url, search_url
from routing.policy import EtaPolicy, default_eta_policy
from store.errors import StoreError
from store.repositories import AgentRepository, OrderRepository

from .signature_capture import SignatureCapture, SignatureImage, SignaturePad, SignatureRequired
from .state_machines.order_state import OrderStateException, advance

logger = logging.getLogger(__name__)

# Failures reported on the result channel. Anything else is a bug and propagates.
REPORTED_ERRORS = (
    ValueError,
    AgentNotFound,
    AgentLookupAmbiguous,
    StoreError,
    OrderStateException,
    SignatureRequired,
)


class SessionView(str, Enum):
    LOGIN = "login"
    LOADING = "loading"
    ACTIVE = "active"      # an open order is on screen
    IDLE = "idle"          # logged in, nothing assigned right now
    DONE = "done"          # order delivered, waiting for "next task"


@dataclass(frozen=True)
class SessionResult:
    ok: bool
    view: SessionView
    error: Optional[str] = None          # exception class name, e.g. "AgentNotFound"
    message: Optional[str] = None

    @classmethod
    def success(cls, view: SessionView, message: Optional[str] = None) -> SessionResult:
        return cls(ok=True, view=view, message=message)

    @classmethod
    def failure(cls, view: SessionView, exc: Exception) -> SessionResult:
        return cls(ok=False, view=view, error=type(exc).__name__, message=str(exc))


@dataclass(frozen=True)
class RouteSummary:
    """
    What the task card shows. distance_km == 0.0 with has_coordinates False
    means the store or customer is missing coordinates, not that they coincide.
    """
    distance_km: float
    eta_minutes: int
    congestion_level: int
    has_coordinates: bool
    navigation_url: str
    preview_url: Optional[str] = None


class DispatchSession:

    def __init__(self,
                 agents: AgentRepository,
                 orders: OrderRepository,
                 *,
                 pad: Optional[SignaturePad] = None,
                 navigator: Optional[Callable[[str], None]] = None,
                 policy: Optional[EtaPolicy] = None,
                 rng: Optional[random.Random] = None):
        self.agents = agents
        self.orders = orders
        self.navigator = navigator #opens external turn-by-turn directions, fire-and-forget
        self.policy = policy or default_eta_policy()
        self.rng = rng

        self.signature = SignatureCapture(pad or SignaturePad())

        self.agent: Optional[Agent] = None
        self.order: Optional[Order] = None
        self.congestion_level: Optional[int] = None
        self.view = SessionView.LOGIN
        self.busy = False
        self.last_result: Optional[SessionResult] = None

    @property
    def agent_online(self) -> bool:
        return self.agent is not None

    # --- Public API ---

    def login(self, phone: str) -> SessionResult:
        if self.busy:
            return self._rejected_busy()

        try:
            with self._loading():
                agent = authenticate(phone, self.agents)
        except REPORTED_ERRORS as e:
            return self._fail(SessionView.LOGIN, e)

        self.agent = agent
        return self._load_active_order()

    def logout(self) -> SessionResult:
        self.signature.clear()
        self.agent = None
        self.order = None
        self.congestion_level = None
        return self._done(SessionResult.success(self._set_view(SessionView.LOGIN)))

    def next_task(self) -> SessionResult:
        """
        Explicit request for the next order. Never called automatically after
        a delivery.
        """
        if self.busy:
            return self._rejected_busy()
        if self.agent is None:
            return self._fail(SessionView.LOGIN, ValueError("Log in before requesting a task"))
        return self._load_active_order()

    def advance(self, requested_status) -> SessionResult:
        """
        Move the current order to `requested_status`. Delivered goes through
        confirm_delivery so the signature gate always applies.
        """
        if self.busy:
            return self._rejected_busy()
        if self.order is None:
            return self._fail(self.view, OrderStateException("No active order"))

        try:
            requested = OrderStatus(requested_status)
        except ValueError:
            return self._fail(self.view, OrderStateException(f"Unknown order status {requested_status!r}"))

        if requested is OrderStatus.DELIVERED:
            return self.confirm_delivery()

        try:
            with self._loading():
                self.order = advance(self.order, requested, self.orders)
        except REPORTED_ERRORS as e:
            return self._fail(SessionView.ACTIVE, e)

        return self._done(SessionResult.success(self._set_view(SessionView.ACTIVE)))

    def start_delivery(self) -> SessionResult:
        """
        Out for Delivery, then open directions. The directions view is a
        convenience: its failure never undoes or fails the status write.
        """
        result = self.advance(OrderStatus.OUT_FOR_DELIVERY)
        if result.ok:
            self._open_navigation()
        return result

    def confirm_delivery(self) -> SessionResult:
        if self.busy:
            return self._rejected_busy()
        if self.order is None:
            return self._fail(self.view, OrderStateException("No active order"))

        if self.signature.is_empty():
            return self._fail(SessionView.ACTIVE, SignatureRequired("Recipient signature is required"))

        try:
            with self._loading():
                delivered = advance(self.order, OrderStatus.DELIVERED, self.orders)
        except REPORTED_ERRORS as e:
            return self._fail(SessionView.ACTIVE, e)

        logger.info("Order %s delivered by agent %s", delivered.order_id, delivered.agent_id)

        # release the order and discard the PoD image
        self.signature.clear()
        self.order = None
        self.congestion_level = None
        return self._done(SessionResult.success(self._set_view(SessionView.DONE)))

    def signature_image(self) -> SignatureImage:
        return self.signature.snapshot()

    def route_summary(self) -> Optional[RouteSummary]:
        if self.order is None:
            return None

        store = self.order.store
        customer = self.order.customer
        store_lat, store_lon = store.coordinates if store else (None, None)
        customer_lat, customer_lon = customer.coordinates if customer else (None, None)

        distance = distance_km(store_lat, store_lon, customer_lat, customer_lon, policy=self.policy)
        eta = estimate_eta(distance, self.congestion_level or self.policy.congestion_min, policy=self.policy)

        has_coordinates = all([store_lat, store_lon, customer_lat, customer_lon])
        return RouteSummary(
            distance_km=distance,
            eta_minutes=eta,
            congestion_level=self.congestion_level,
            has_coordinates=has_coordinates,
            navigation_url=self._navigation_url(),
            preview_url=preview_embed_url((customer_lat, customer_lon)) if has_coordinates else None,
        )

    # --- internals ---

    def _load_active_order(self) -> SessionResult:
        previous_id = self.order.order_id if self.order else None

        try:
            with self._loading():
                order = find_active_order(self.agent, self.orders)
        except REPORTED_ERRORS as e:
            # keep whatever was on screen; the courier can retry
            return self._fail(SessionView.ACTIVE if self.order else SessionView.IDLE, e)

        self.order = order
        if order is None:
            self.congestion_level = None
            self.signature.clear()
            return self._done(SessionResult.success(self._set_view(SessionView.IDLE), "No active tasks found."))

        # congestion is sampled once per active task, not per render
        if order.order_id != previous_id or self.congestion_level is None:
            self.congestion_level = sample_congestion(self.rng, policy=self.policy)
            self.signature.clear()

        return self._done(SessionResult.success(self._set_view(SessionView.ACTIVE)))

    def _navigation_url(self) -> str:
        customer = self.order.customer
        store = self.order.store
        if customer and customer.lat and customer.lon:
            origin = store.coordinates if store and store.lat and store.lon else None
            return directions_url(customer.coordinates, origin=origin)
        # no coordinates: fall back to searching the delivery address
        address = customer.delivery_address if customer else None
        return search_url(address or "")

    def _open_navigation(self) -> None:
        if self.navigator is None or self.order is None:
            return
        try:
            self.navigator(self._navigation_url())
        except Exception:
            logger.exception("Could not open directions for order %s", self.order.order_id)

    @contextmanager
    def _loading(self) -> Iterator[None]:
        previous = self.view
        self.busy = True
        self.view = SessionView.LOADING
        try:
            yield
        finally:
            self.busy = False
            self.view = previous

    def _set_view(self, view: SessionView) -> SessionView:
        self.view = view
        return view

    def _fail(self, view: SessionView, exc: Exception) -> SessionResult:
        logger.warning("Session action failed: %s: %s", type(exc).__name__, exc)
        return self._done(SessionResult.failure(self._set_view(view), exc))

    def _rejected_busy(self) -> SessionResult:
        return SessionResult(ok=False, view=self.view, error="Busy", message="Another request is in progress")

    def _done(self, result: SessionResult) -> SessionResult:
        self.last_result = result
        return result
