import pytest
import requests

from orders.models import OrderStatus
from store.errors import AgentQueryError, OrderQueryError, StoreRequestError, UpdateError
from store.postgrest import ORDER_SELECT, PostgrestAgentRepository, PostgrestOrderRepository, in_filter
from store.postgrest_client import PostgrestClient
from dispatch.session import DispatchSession, SessionView


class MockResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.content = text.encode() if payload is None else b"x"

    def json(self):
        if self._payload is None:
            raise requests.JSONDecodeError("Expecting value", self.text, 0)
        return self._payload


class MockSession:
    """
    Replays a scripted list of responses (or exceptions) and records every call.
    """
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_client(*outcomes, **kwargs):
    session = MockSession(*outcomes)
    delays = []
    client = PostgrestClient(
        "https://demo.supabase.co/",
        "anon-key",
        session=session,
        sleep=delays.append,
        timeout=kwargs.pop("timeout", 2),
        max_attempts=kwargs.pop("max_attempts", 3),
        backoff_seconds=kwargs.pop("backoff_seconds", 0.5),
    )
    return client, session, delays


ORDER_ROW = {
    "order_id": "o_000001",
    "status": "Pending",
    "agent_id": "A101",
    "customer_ref": "c_1",
    "store_ref": "s_1",
    "product_ref": "p_1",
    "qty_kg": 1.5,
    "order_value_inr": "850.00",
    "created_at": "2024-05-01T10:00:00+00:00",
    "customer": {"full_name": "Asha Rao", "delivery_address": "14 MG Road", "lat": 12.95, "lon": 77.65},
    "store": {"location_name": "mishTee Jayanagar", "lat": 12.90, "lon": 77.60},
    "product": {"sweet_name": "Kaju Katli", "variant_type": "Classic"},
}


def test_missing_url_is_a_configuration_error(monkeypatch):
    monkeypatch.setattr("store.postgrest_client.SUPABASE_URL", None)
    with pytest.raises(ValueError):
        PostgrestClient(session=MockSession())


def test_select_sends_auth_headers_and_timeout():
    client, session, _ = make_client(MockResponse(payload=[]))

    assert client.select("agents", {"phone_number": "eq.9876500000"}) == []

    method, url, kwargs = session.calls[0]
    assert method == "GET"
    assert url == "https://demo.supabase.co/rest/v1/agents"
    assert kwargs["headers"]["apikey"] == "anon-key"
    assert kwargs["headers"]["Authorization"] == "Bearer anon-key"
    assert kwargs["timeout"] == 2


def test_transient_failures_are_retried_with_backoff():
    client, session, delays = make_client(
        requests.Timeout("slow"),
        MockResponse(status_code=503),
        MockResponse(payload=[{"agent_id": "A101"}]),
    )

    assert client.select("agents", {}) == [{"agent_id": "A101"}]
    assert len(session.calls) == 3
    assert delays == [0.5, 1.0]


def test_retries_are_bounded():
    client, session, delays = make_client(
        requests.ConnectionError("down"),
        requests.ConnectionError("down"),
        max_attempts=2,
    )

    with pytest.raises(StoreRequestError):
        client.select("agents", {})
    assert len(session.calls) == 2
    assert delays == [0.5]


def test_client_errors_are_not_retried():
    client, session, _ = make_client(MockResponse(status_code=400, text="bad filter"))

    with pytest.raises(StoreRequestError) as excinfo:
        client.select("orders", {})
    assert excinfo.value.status_code == 400
    assert len(session.calls) == 1


def test_agent_repository_queries_by_phone():
    client, session, _ = make_client(MockResponse(payload=[{"agent_id": "A101", "phone_number": "9876500000"}]))

    agents = PostgrestAgentRepository(client).find_by_phone("9876500000")

    assert agents[0].agent_id == "A101"
    params = session.calls[0][2]["params"]
    assert params["phone_number"] == "eq.9876500000"
    assert params["limit"] == "2"


def test_agent_repository_wraps_store_failures():
    client, _, _ = make_client(MockResponse(status_code=401, text="bad key"))
    with pytest.raises(AgentQueryError):
        PostgrestAgentRepository(client).find_by_phone("9876500000")


def test_order_repository_builds_the_active_order_query():
    client, session, _ = make_client(MockResponse(payload=[ORDER_ROW]))

    order = PostgrestOrderRepository(client).find_latest_open("A101", [OrderStatus.PENDING, OrderStatus.OUT_FOR_DELIVERY])

    params = session.calls[0][2]["params"]
    assert params["select"] == ORDER_SELECT
    assert params["agent_id"] == "eq.A101"
    assert params["status"] == 'in.("Pending","Out for Delivery")'
    assert params["order"] == "created_at.desc"
    assert params["limit"] == "1"

    assert order.status is OrderStatus.PENDING
    assert order.order_value_inr == 850.0
    assert order.customer.full_name == "Asha Rao"
    assert order.store.coordinates == (12.90, 77.60)
    assert order.product.sweet_name == "Kaju Katli"
    assert order.created_at.year == 2024


def test_order_repository_returns_none_for_no_rows():
    client, _, _ = make_client(MockResponse(payload=[]))
    assert PostgrestOrderRepository(client).find_latest_open("A101", [OrderStatus.PENDING]) is None


def test_order_repository_wraps_query_failures():
    client, _, _ = make_client(requests.Timeout("slow"), max_attempts=1)
    with pytest.raises(OrderQueryError):
        PostgrestOrderRepository(client).find_latest_open("A101", [OrderStatus.PENDING])


def test_malformed_row_is_a_query_error():
    client, _, _ = make_client(MockResponse(payload=[dict(ORDER_ROW, status="Cancelled")]))
    with pytest.raises(OrderQueryError):
        PostgrestOrderRepository(client).find_latest_open("A101", [OrderStatus.PENDING])


def test_update_writes_status_only():
    client, session, _ = make_client(MockResponse(payload=[{"order_id": "o_000001", "status": "Delivered"}]))

    PostgrestOrderRepository(client).update_status("o_000001", OrderStatus.DELIVERED)

    method, _, kwargs = session.calls[0]
    assert method == "PATCH"
    assert kwargs["params"] == {"order_id": "eq.o_000001"}
    assert kwargs["json"] == {"status": "Delivered"}
    assert kwargs["headers"]["Prefer"] == "return=representation"


def test_update_matching_no_row_is_an_error():
    client, _, _ = make_client(MockResponse(payload=[]))
    with pytest.raises(UpdateError):
        PostgrestOrderRepository(client).update_status("o_404", OrderStatus.ASSIGNED)


def test_update_failure_is_wrapped():
    client, _, _ = make_client(MockResponse(status_code=500), max_attempts=1)
    with pytest.raises(UpdateError):
        PostgrestOrderRepository(client).update_status("o_000001", OrderStatus.ASSIGNED)


def test_in_filter_quotes_status_values():
    assert in_filter([OrderStatus.OUT_FOR_DELIVERY]) == 'in.("Out for Delivery")'


@pytest.mark.parametrize("error", [
    requests.exceptions.ChunkedEncodingError("broken body"),
    requests.exceptions.TooManyRedirects("redirect loop"),
    requests.exceptions.MissingSchema("no scheme in demo.supabase.co"),
])
def test_non_transient_request_errors_fail_without_retry(error):
    client, session, delays = make_client(error)

    with pytest.raises(StoreRequestError):
        client.select("orders", {})
    assert len(session.calls) == 1
    assert delays == []


def test_non_json_body_is_a_store_error():
    client, session, _ = make_client(MockResponse(status_code=200, text="<html>Gateway</html>"))

    with pytest.raises(StoreRequestError) as excinfo:
        client.select("orders", {})
    assert excinfo.value.status_code == 200
    assert len(session.calls) == 1


def test_non_json_order_body_is_an_order_query_error():
    client, _, _ = make_client(MockResponse(status_code=200, text="<html>Gateway</html>"))
    with pytest.raises(OrderQueryError):
        PostgrestOrderRepository(client).find_latest_open("A101", [OrderStatus.PENDING])


def test_malformed_agent_row_is_an_agent_query_error():
    client, _, _ = make_client(MockResponse(payload=[{"phone_number": "9876500000"}]))
    with pytest.raises(AgentQueryError):
        PostgrestAgentRepository(client).find_by_phone("9876500000")


def test_trimmed_fractional_seconds_are_parsed():
    client, _, _ = make_client(MockResponse(payload=[dict(ORDER_ROW, created_at="2024-05-01T10:15:00.12345+00:00")]))

    order = PostgrestOrderRepository(client).find_latest_open("A101", [OrderStatus.PENDING])

    assert order.created_at.microsecond == 123450
    assert order.created_at.minute == 15


@pytest.mark.parametrize("orders_outcome", [
    requests.exceptions.ChunkedEncodingError("broken body"),
    MockResponse(status_code=200, text="<html>Gateway</html>"),
])
def test_session_reports_broken_order_responses(orders_outcome):
    client, _, _ = make_client(
        MockResponse(payload=[{"agent_id": "A101", "phone_number": "9876500000"}]),
        orders_outcome,
    )
    session = DispatchSession(PostgrestAgentRepository(client), PostgrestOrderRepository(client))

    result = session.login("9876500000")

    assert not result.ok
    assert result.error == "OrderQueryError"
    assert session.view == SessionView.IDLE
