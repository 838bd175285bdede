#Purpose: ETA estimation policy.
#Converts a store -> customer straight line into the numbers the courier sees:
#distance in km ("7.76 km away")
#minutes to arrival ("arrives in 47 min")
#Typical responsibilities:
#haversine great-circle distance (no road network, single straight-line estimate)
#minutes from distance at the policy's average speed
#fixed congestion penalty above the policy threshold
#Keeps ETA logic separate from the session and from map links.

import math
import random
from typing import Optional

from .policy import EtaPolicy, default_eta_policy


def distance_km(
        store_lat: Optional[float],
        store_lon: Optional[float],
        customer_lat: Optional[float],
        customer_lon: Optional[float],
        policy: Optional[EtaPolicy] = None,
) -> float:
    """
    Great-circle distance between the store and the customer, in km.

    Returns 0.0 when any coordinate is missing or zero. Callers must read 0.0
    as "insufficient data", not "co-located".
    """
    policy = policy or default_eta_policy()

    #degraded data: any falsy coordinate (None, 0) means we cannot estimate
    if not all([store_lat, store_lon, customer_lat, customer_lon]):
        return 0.0

    lat1, lon1 = math.radians(store_lat), math.radians(store_lon)
    lat2, lon2 = math.radians(customer_lat), math.radians(customer_lon)

    d_lat = lat2 - lat1
    d_lon = lon2 - lon1

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return round(policy.earth_radius_km * c, policy.distance_decimals)


def estimate_eta(distance: float, congestion_level: int, policy: Optional[EtaPolicy] = None) -> int:
    """
    Minutes to arrival: ceil(distance * minutes_per_km), plus the congestion
    penalty when congestion_level is above the policy threshold.
    """
    policy = policy or default_eta_policy()

    minutes = math.ceil(distance * policy.minutes_per_km)
    if congestion_level > policy.congestion_threshold:
        minutes += policy.congestion_penalty_minutes
    return int(minutes)


def sample_congestion(rng: Optional[random.Random] = None, policy: Optional[EtaPolicy] = None) -> int:
    """
    Stub traffic signal: a random congestion level inside the policy range.
    The session samples this once per active task, never per render.
    """
    policy = policy or default_eta_policy()
    rng = rng or random
    return rng.randint(policy.congestion_min, policy.congestion_max)
