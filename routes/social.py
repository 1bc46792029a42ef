import logging

import httpx
from flask import Blueprint, current_app, jsonify

from utils.social import fetch_page_posts

logger = logging.getLogger(__name__)

social_bp = Blueprint("social", __name__, url_prefix="/api/facebook")


@social_bp.get("/posts")
def facebook_posts():
    page_id = current_app.config.get("FACEBOOK_PAGE_ID")
    token = current_app.config.get("FACEBOOK_ACCESS_TOKEN")
    if not page_id or not token:
        return jsonify(error="Missing Facebook credentials"), 500

    try:
        posts = fetch_page_posts(page_id, token, limit=current_app.config.get("FACEBOOK_POSTS_LIMIT", 4))
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("facebook posts fetch failed: %s", exc)
        return jsonify(error="Failed to fetch Facebook posts", details=str(exc)), 500

    return jsonify(posts=posts), 200
