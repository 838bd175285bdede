#Marks store as a package.
#Re-exports the repository interface, the error taxonomy and the two adapters
#(PostgREST over HTTP, in-memory) so callers never import adapter internals.
#No business logic.

from .errors import StoreError, StoreRequestError, AgentQueryError, OrderQueryError, UpdateError
from .repositories import AgentRepository, OrderRepository
from .postgrest_client import PostgrestClient
from .postgrest import PostgrestAgentRepository, PostgrestOrderRepository
from .memory import InMemoryStore

__all__ = [
    "StoreError",
    "StoreRequestError",
    "AgentQueryError",
    "OrderQueryError",
    "UpdateError",
    "AgentRepository",
    "OrderRepository",
    "PostgrestClient",
    "PostgrestAgentRepository",
    "PostgrestOrderRepository",
    "InMemoryStore",
]
