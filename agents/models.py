"""
Purpose: Core data model for the agents (Mitra couriers) domain.
What it does:
Defines the identity a courier logs in as, without relying on any store client.
Agents are provisioned outside this system and are immutable here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class Agent:
    """
    A courier identity resolved from a phone number.
    """
    agent_id: str
    phone_number: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Agent:
        return cls(
            agent_id=str(row["agent_id"]),
            phone_number=str(row["phone_number"]),
        )
