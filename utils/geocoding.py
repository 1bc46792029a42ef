import asyncio
import logging
from urllib.parse import urlencode

import httpx

logger = logging.getLogger(__name__)

AUTOCOMPLETE_URL = "https://api.geoapify.com/v1/geocode/autocomplete"
STATIC_MAP_URL = "https://maps.geoapify.com/v1/staticmap"
AUTOCOMPLETE_LIMIT = 5

MAP_PROVIDERS = ("openstreetmap", "google")
DEFAULT_MAP_PROVIDER = "openstreetmap"


def suggestion_from_feature(feature: dict):
    props = (feature or {}).get("properties") or {}
    coords = ((feature or {}).get("geometry") or {}).get("coordinates") or [None, None]
    lon = props.get("lon") if isinstance(props.get("lon"), (int, float)) else coords[0]
    lat = props.get("lat") if isinstance(props.get("lat"), (int, float)) else coords[1]
    if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
        return None

    label = props.get("address_line1") or props.get("name") or props.get("street") or props.get("formatted") or ""
    secondary = ", ".join(
        str(p) for p in (
            props.get("address_line2"),
            props.get("city"),
            props.get("state_code") or props.get("state"),
            props.get("country"),
        ) if p
    )
    place_id = props.get("place_id") or f"{lat},{lon}"
    if not label:
        return None
    return {
        "id": str(place_id),
        "label": label,
        "secondary": secondary or None,
        "lat": lat,
        "lon": lon,
    }


def suggestions_from_payload(payload) -> list:
    features = payload.get("features") if isinstance(payload, dict) else None
    if not isinstance(features, list):
        return []
    out = []
    for f in features:
        s = suggestion_from_feature(f)
        if s:
            out.append(s)
    return out


def _params(text: str, api_key: str) -> dict:
    return {"text": text, "limit": AUTOCOMPLETE_LIMIT, "apiKey": api_key}


def autocomplete(text: str, api_key: str, client: httpx.Client = None) -> list:
    http = client or httpx.Client()
    try:
        resp = http.get(AUTOCOMPLETE_URL, params=_params(text, api_key))
        resp.raise_for_status()
        return suggestions_from_payload(resp.json())
    finally:
        if client is None:
            http.close()


class AutocompleteSession:
    """
    Search-as-you-type: each new query cancels whatever lookup is still in
    flight, so only the latest keystroke's results are ever returned.
    """

    def __init__(self, api_key: str, client: httpx.AsyncClient, debounce_seconds: float = 0.25):
        self._api_key = api_key
        self._client = client
        self._debounce = debounce_seconds
        self._inflight = None

    async def _lookup(self, text: str) -> list:
        if self._debounce:
            await asyncio.sleep(self._debounce)
        resp = await self._client.get(AUTOCOMPLETE_URL, params=_params(text, self._api_key))
        resp.raise_for_status()
        return suggestions_from_payload(resp.json())

    async def search(self, text: str):
        """
        Returns suggestions for `text`, or None if a newer search superseded
        this one before it finished.
        """
        self.cancel()
        query = (text or "").strip()
        if not query:
            return []

        task = asyncio.ensure_future(self._lookup(query))
        self._inflight = task
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled() and self._inflight is not task:
                return None
            raise
        finally:
            if self._inflight is task:
                self._inflight = None

    def cancel(self):
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        self._inflight = None


def build_static_map_url(lat: float, lon: float, api_key: str) -> str:
    if not api_key:
        return ""
    params = {
        "style": "osm-bright-smooth",
        "type": "map",
        "format": "png",
        "scaleFactor": "2",
        "width": "600",
        "height": "360",
        "zoom": "14",
        "center": f"lonlat:{lon},{lat}",
        "marker": f"lonlat:{lon},{lat};type:awesome;icon:map-marker;icontype:awesome;color:#dd2c00;size:large",
        "apiKey": api_key,
    }
    return f"{STATIC_MAP_URL}?{urlencode(params)}"


def build_map_link(lat: float, lon: float, provider: str = DEFAULT_MAP_PROVIDER) -> str:
    lat_s = f"{lat:.6f}"
    lon_s = f"{lon:.6f}"
    if provider == "google":
        return f"https://www.google.com/maps/search/?api=1&query={lat_s},{lon_s}"
    return f"https://www.openstreetmap.org/?mlat={lat_s}&mlon={lon_s}#map=16/{lat_s}/{lon_s}"


def detect_map_provider(url: str):
    value = (url or "").lower()
    if not value:
        return None
    if "google.com/maps" in value or "goo.gl/maps" in value or "maps.app.goo.gl" in value:
        return "google"
    if "openstreetmap.org" in value or "geoapify.com" in value:
        return "openstreetmap"
    return None
