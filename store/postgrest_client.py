#Purpose: The PostgREST (Supabase) "adapter/client".
#Sole responsibility: talk to the store's REST endpoint via HTTP and return decoded rows.
#Encapsulates PostgREST-specific details:
#auth headers (apikey + bearer)
#URL construction (/rest/v1/<table>)
#timeouts / bounded retries / error handling
#It should not contain dispatch rules or status logic.

import logging
import os
import time
from typing import Any, Callable, Dict, List, Optional

import requests
from dotenv import load_dotenv

from .errors import StoreRequestError

# Read the store location and credentials from environment
# Example in .env:
# SUPABASE_URL=https://xyzcompany.supabase.co
# SUPABASE_ANON_KEY=eyJhbGciOi...
load_dotenv()
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")
STORE_TIMEOUT_SECONDS = float(os.getenv("STORE_TIMEOUT_SECONDS", "5"))
STORE_MAX_ATTEMPTS = int(os.getenv("STORE_MAX_ATTEMPTS", "3"))
STORE_BACKOFF_SECONDS = float(os.getenv("STORE_BACKOFF_SECONDS", "0.5"))

logger = logging.getLogger(__name__)


class PostgrestClient:
    """
    PostgREST Adapter / Client

    Sole responsibility:
    - Talk to /rest/v1 via HTTP
    - Retry transient failures (timeouts, connection errors, 5xx) a bounded number of times
    - Return decoded JSON rows

    """
    def __init__(self,
                 base_url: Optional[str] = None,
                 api_key: Optional[str] = None,
                 *,
                 timeout: Optional[float] = None,
                 max_attempts: Optional[int] = None,
                 backoff_seconds: Optional[float] = None,
                 session: Optional[requests.Session] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.base_url = (base_url or SUPABASE_URL or "").rstrip("/")
        self.api_key = api_key or SUPABASE_ANON_KEY
        self.timeout = timeout if timeout is not None else STORE_TIMEOUT_SECONDS #seconds to wait before giving up on one attempt
        self.max_attempts = max_attempts if max_attempts is not None else STORE_MAX_ATTEMPTS
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else STORE_BACKOFF_SECONDS
        self.session = session or requests.Session()
        self._sleep = sleep

        if not self.base_url:
            raise ValueError("Store URL not set. Please set SUPABASE_URL in the .env file.")

        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    #----------------
    # Internal helpers
    #----------------
    def table_url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _request(self, method: str, table: str, *,
                 params: Dict[str, str],
                 json: Optional[Dict[str, Any]] = None,
                 prefer: Optional[str] = None) -> Any:
        """
        One logical request, at most max_attempts HTTP calls.
        4xx responses are caller errors and are never retried.
        """
        url = self.table_url(table)
        last_error: Optional[StoreRequestError] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                response = self.session.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=self.headers(prefer),
                    timeout=self.timeout,
                )
            except (requests.Timeout, requests.ConnectionError) as e:
                last_error = StoreRequestError(f"{method} {table} failed: {e}")
            except requests.RequestException as e:
                #not transient (bad URL, redirect loop, broken body): fail without retrying
                raise StoreRequestError(f"{method} {table} failed: {e}") from e
            else:
                if response.status_code >= 500:
                    last_error = StoreRequestError(
                        f"{method} {table} returned {response.status_code}",
                        status_code=response.status_code,
                    )
                elif response.status_code >= 400:
                    raise StoreRequestError(
                        f"{method} {table} rejected ({response.status_code}): {response.text}",
                        status_code=response.status_code,
                    )
                else:
                    if not response.content:
                        return []
                    try:
                        return response.json()
                    except ValueError as e:
                        #a gateway or proxy page instead of PostgREST JSON
                        raise StoreRequestError(
                            f"{method} {table} returned a non-JSON body: {e}",
                            status_code=response.status_code,
                        ) from e

            if attempt < self.max_attempts:
                delay = self.backoff_seconds * (2 ** (attempt - 1))
                logger.warning("Store %s %s attempt %s/%s failed (%s), retrying in %.2fs",
                               method, table, attempt, self.max_attempts, last_error, delay)
                self._sleep(delay)

        logger.error("Store %s %s gave up after %s attempts: %s", method, table, self.max_attempts, last_error)
        raise last_error

    #----------------
    # Public methods
    #----------------
    def select(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        """
        GET /rest/v1/<table> with PostgREST filter params, e.g.
        {"select": "*", "phone_number": "eq.9876500000", "limit": "1"}
        """
        return self._request("GET", table, params=params)

    def update(self, table: str, filters: Dict[str, str], values: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        PATCH /rest/v1/<table>?<filters> with `values`, returning the updated rows
        so callers can tell whether anything matched.
        """
        return self._request("PATCH", table, params=filters, json=values, prefer="return=representation")
