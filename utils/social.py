import logging
from datetime import datetime

import httpx

logger = logging.getLogger(__name__)

GRAPH_URL = "https://graph.facebook.com/v24.0/{page_id}/posts"
FIELDS = "message,created_time,full_picture,permalink_url"


def _display_date(created_time: str) -> str:
    if not created_time:
        return ""
    try:
        # Graph API sends e.g. 2025-05-01T17:03:00+0000
        dt = datetime.strptime(created_time, "%Y-%m-%dT%H:%M:%S%z")
    except ValueError:
        return created_time
    return dt.strftime("%b %d, %Y, %I:%M %p")


def to_post(raw: dict) -> dict:
    return {
        "id": raw.get("id"),
        "text": raw.get("message") or "",
        "date": _display_date(raw.get("created_time")),
        "image": raw.get("full_picture"),
        "url": raw.get("permalink_url"),
    }


def fetch_page_posts(page_id: str, access_token: str, limit: int = 4, client: httpx.Client = None) -> list:
    """Latest page posts. Raises httpx.HTTPError / ValueError on transport or decode failure."""
    http = client or httpx.Client()
    try:
        resp = http.get(
            GRAPH_URL.format(page_id=page_id),
            params={"fields": FIELDS, "limit": limit, "access_token": access_token},
        )
        data = resp.json()
    finally:
        if client is None:
            http.close()

    items = data.get("data") if isinstance(data, dict) else None
    if not isinstance(items, list):
        logger.info("graph API returned no post data")
        return []
    return [to_post(p) for p in items if isinstance(p, dict)]
