#Purpose: Links into the external map service (Google Maps).
#Both uses are read-only and fire-and-forget: the core builds a URL and the
#presentation layer embeds or opens it. No response is ever consumed.
#- location preview (embedded map of the drop point)
#- turn-by-turn directions (store -> customer)
#- address search (fallback when the customer has no coordinates)

from typing import Optional, Tuple
from urllib.parse import urlencode

# Internal coordinate type: (lat, lon)
LatLon = Tuple[float, float]

MAPS_BASE_URL = "https://www.google.com/maps"


def format_point(point: LatLon) -> str:
    """(lat, lon) -> 'lat,lon' as Google Maps expects it."""
    lat, lon = point
    return f"{lat},{lon}"


def directions_url(destination: LatLon, origin: Optional[LatLon] = None, travel_mode: str = "driving") -> str:
    """
    Turn-by-turn directions link. Without an origin the map app starts from
    the device's current position.
    """
    params = {"api": "1", "destination": format_point(destination), "travelmode": travel_mode}
    if origin is not None:
        params["origin"] = format_point(origin)
    return f"{MAPS_BASE_URL}/dir/?{urlencode(params)}"


def preview_embed_url(point: LatLon, zoom: int = 15) -> str:
    """Embeddable map centred on the point (iframe src)."""
    params = {"q": format_point(point), "z": str(zoom), "output": "embed"}
    return f"{MAPS_BASE_URL}?{urlencode(params)}"


def search_url(address: str) -> str:
    """Search the map by free-text address."""
    params = {"api": "1", "query": address}
    return f"{MAPS_BASE_URL}/search/?{urlencode(params)}"
