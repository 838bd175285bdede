"""
Purpose: Resolve a phone number to a courier identity.
What it does:
The phone number is the only credential (internal dispatch tool, not a
security boundary). One read against the agents repository, no side effects.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .models import Agent

if TYPE_CHECKING:
    from store.repositories import AgentRepository

logger = logging.getLogger(__name__)


class AgentNotFound(Exception):
    """No agent is registered under the phone number."""
    pass


class AgentLookupAmbiguous(Exception):
    """More than one agent shares the phone number (the store should prevent this)."""
    pass


def normalize_phone(phone: str) -> str:
    """
    Trim surrounding whitespace. No format validation beyond non-empty.
    """
    phone = (phone or "").strip()
    if not phone:
        raise ValueError("Phone number is required")
    return phone


def authenticate(phone: str, agents: AgentRepository) -> Agent:
    """
    Look up exactly one agent whose phone_number equals the input.

    Raises:
        ValueError: empty phone number
        AgentNotFound: zero matching rows
        AgentLookupAmbiguous: more than one matching row
        AgentQueryError: store read failure (propagated from the repository)
    """
    phone = normalize_phone(phone)

    #ask for two rows so a duplicate phone number is detectable
    matches = agents.find_by_phone(phone, limit=2)

    if not matches:
        raise AgentNotFound(f"No agent registered for phone {phone}")

    if len(matches) > 1:
        logger.error("Phone %s matches %s agents", phone, len(matches))
        raise AgentLookupAmbiguous(f"Phone {phone} matches more than one agent")

    agent = matches[0]
    logger.info("Agent %s authenticated", agent.agent_id)
    return agent
