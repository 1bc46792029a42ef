from datetime import date, datetime

from flask import Blueprint, jsonify, request

from models import db
from models.event import Event
from models.menu import Menu
from security.rbac import require_admin
from utils.audit import log_event
from utils.calendar import day_counts, event_presets, pick_current_event
from utils.payloads import EventPayload, PayloadError
from utils.timefmt import normalize_time, parse_canonical_minutes

events_bp = Blueprint("events", __name__, url_prefix="/api/events")

UPDATABLE_FIELDS = (
    "date", "title", "location", "start_time", "end_time", "menu_id",
    "maps_url", "maps_label", "maps_provider", "lat", "lng", "is_published",
)


def event_from_payload(p: EventPayload) -> Event:
    return Event(
        date_str=p.date,
        title=p.title,
        location=p.location,
        start_time=p.start_time,
        end_time=p.end_time,
        menu_id=p.menu_id,
        maps_url=p.maps_url,
        maps_label=p.maps_label,
        maps_provider=p.maps_provider,
        lat=p.lat,
        lng=p.lng,
        is_published=p.is_published,
    )


def _menu_missing(menu_id) -> bool:
    return menu_id is not None and db.session.get(Menu, menu_id) is None


# ---------- PUBLIC ----------
@events_bp.get("")
def list_events():
    date_str = (request.args.get("date") or "").strip()
    q = Event.query.filter_by(is_published=True)
    if date_str:
        try:
            date.fromisoformat(date_str)
        except ValueError:
            return jsonify(error="Invalid date. Use YYYY-MM-DD"), 400
        q = q.filter(Event.date_str == date_str)

    rows = q.order_by(Event.date_str.asc(), Event.created_at.asc()).all()
    return jsonify(events=[e.to_dict() for e in rows]), 200


@events_bp.get("/counts")
def month_counts():
    year = request.args.get("year", type=int)
    month = request.args.get("month", type=int)
    if not year or not month or not 1 <= month <= 12:
        return jsonify(error="year and month (1-12) are required"), 400

    # full scan, filtered by month prefix
    events = Event.query.filter_by(is_published=True).all()
    return jsonify(counts=day_counts(events, year, month)), 200


@events_bp.get("/today")
def today_event():
    """
    ?date= only picks the day (default: today, server-local). The moment
    within that day comes from ?time= ("12:30", "1pm", ...) or, when absent,
    from the server's local clock.
    """
    now = datetime.now()
    day = (request.args.get("date") or "").strip() or now.date().isoformat()
    try:
        date.fromisoformat(day)
    except ValueError:
        return jsonify(error="Invalid date. Use YYYY-MM-DD"), 400

    now_minutes = now.hour * 60 + now.minute
    time_arg = (request.args.get("time") or "").strip()
    if time_arg:
        now_minutes = parse_canonical_minutes(normalize_time(time_arg))
        if now_minutes is None:
            return jsonify(error="Invalid time"), 400

    rows = (
        Event.query
        .filter_by(date_str=day, is_published=True)
        .order_by(Event.created_at.asc())
        .all()
    )
    pick = pick_current_event(rows, now_minutes)
    return jsonify(event=pick.to_dict() if pick else None), 200


# ---------- ADMIN ----------
@events_bp.get("/presets")
@require_admin
def presets():
    return jsonify(presets=event_presets(Event.query.all())), 200


@events_bp.post("")
@require_admin
def create_event():
    try:
        p = EventPayload.from_json(request.get_json(silent=True))
    except PayloadError as exc:
        return jsonify(error=str(exc)), 400

    if _menu_missing(p.menu_id):
        return jsonify(error="Menu not found"), 404

    ev = event_from_payload(p)
    db.session.add(ev)
    db.session.commit()

    log_event("EVENT_CREATE", entity="event", entity_id=ev.id, metadata={"date": ev.date_str})
    return jsonify(ev.to_dict()), 201


@events_bp.put("/<int:event_id>")
@require_admin
def update_event(event_id: int):
    ev = db.session.get(Event, event_id)
    if not ev:
        return jsonify(error="Event not found"), 404

    data = request.get_json(silent=True) or {}
    try:
        p = EventPayload.from_json(data, partial=True)
    except PayloadError as exc:
        return jsonify(error=str(exc)), 400

    supplied = set(data)
    if "maps_coords" in supplied:
        supplied.update({"lat", "lng"})
    for name in UPDATABLE_FIELDS:
        if name not in supplied:
            continue
        if name == "date":
            if p.date:
                ev.date_str = p.date
        elif name == "title":
            if p.title:
                ev.title = p.title
        else:
            setattr(ev, name, getattr(p, name))

    if _menu_missing(ev.menu_id):
        db.session.rollback()
        return jsonify(error="Menu not found"), 404

    db.session.commit()
    log_event("EVENT_UPDATE", entity="event", entity_id=ev.id)
    return jsonify(ev.to_dict()), 200


@events_bp.delete("/<int:event_id>")
@require_admin
def delete_event(event_id: int):
    ev = db.session.get(Event, event_id)
    if not ev:
        return jsonify(error="Event not found"), 404

    db.session.delete(ev)
    db.session.commit()

    log_event("EVENT_DELETE", entity="event", entity_id=event_id)
    return jsonify(success=True), 200
