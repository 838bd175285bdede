"""
Agents (Mitra couriers) domain package.

Public API:
- Domain model: Agent
- Login entry: authenticate, AgentNotFound, AgentLookupAmbiguous
"""
from .models import Agent
from .authenticator import authenticate, AgentNotFound, AgentLookupAmbiguous

__all__ = ["Agent", "authenticate", "AgentNotFound", "AgentLookupAmbiguous"]
