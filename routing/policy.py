"""
Purpose: Central configuration for distance / ETA estimation.
What it does:

Stores the tunable constants used by routing.eta_service:

EARTH_RADIUS_KM = 6371
MINUTES_PER_KM = 6          (assumed average speed of 10 km/h)
CONGESTION_THRESHOLD = 7    (levels above this get the penalty)
CONGESTION_PENALTY_MIN = 20

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class EtaPolicy:
    """
    Central configuration for the straight-line ETA estimate.
    """

    # --- Geo math ---
    earth_radius_km: float = 6371.0
    distance_decimals: int = 2

    # --- Travel speed ---
    # 6 minutes per km == 10 km/h average through city traffic
    minutes_per_km: float = 6.0

    # --- Congestion ---
    # Congestion is an integer level in [min, max], sampled once per active task.
    congestion_min: int = 1
    congestion_max: int = 10
    congestion_threshold: int = 7
    congestion_penalty_minutes: int = 20

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.earth_radius_km <= 0:
            raise ValueError("earth_radius_km must be > 0")

        if self.minutes_per_km <= 0:
            raise ValueError("minutes_per_km must be > 0")

        if self.congestion_min > self.congestion_max:
            raise ValueError("congestion_min must be <= congestion_max")

        if not self.congestion_min <= self.congestion_threshold <= self.congestion_max:
            raise ValueError("congestion_threshold must sit inside the congestion range")

        if self.congestion_penalty_minutes < 0:
            raise ValueError("congestion_penalty_minutes must be >= 0")


def default_eta_policy() -> EtaPolicy:
    """
    Convenience factory for the default policy.
    """
    p = EtaPolicy()
    p.validate()
    return p
