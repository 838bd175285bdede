#Marks routing as a package.
#Re-exports the public APIs (distance_km, estimate_eta, map links) so other
#modules import from routing without knowing internal file names.
#No business logic.

from .eta_service import distance_km, estimate_eta, sample_congestion
from .maps_links import directions_url, preview_embed_url, search_url
from .policy import EtaPolicy, default_eta_policy

__all__ = [
           "distance_km",
           "estimate_eta",
             "sample_congestion",
             "directions_url",
             "preview_embed_url",
             "search_url",
             "EtaPolicy",
             "default_eta_policy",
             ]
