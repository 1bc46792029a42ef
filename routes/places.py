import logging

import httpx
from flask import Blueprint, current_app, jsonify, request

from utils.geocoding import autocomplete, build_static_map_url

logger = logging.getLogger(__name__)

places_bp = Blueprint("places", __name__, url_prefix="/api/places")

DISABLED_HINT = "Address search is disabled. Set GEOAPIFY_API_KEY to enable suggestions and map previews."


@places_bp.get("/autocomplete")
def place_autocomplete():
    api_key = current_app.config.get("GEOAPIFY_API_KEY")
    if not api_key:
        return jsonify(enabled=False, hint=DISABLED_HINT, results=[]), 200

    text = (request.args.get("text") or "").strip()
    if not text:
        return jsonify(enabled=True, results=[]), 200

    try:
        results = autocomplete(text, api_key)
    except httpx.HTTPError as exc:
        logger.warning("autocomplete failed for %r: %s", text, exc)
        return jsonify(error=f"Geoapify autocomplete failed: {exc}"), 500

    for r in results:
        r["static_map_url"] = build_static_map_url(r["lat"], r["lon"], api_key)
    return jsonify(enabled=True, results=results), 200
