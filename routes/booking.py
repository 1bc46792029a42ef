import logging
from html import escape

from flask import Blueprint, current_app, jsonify, request

from models import db
from models.booking_request import BookingRequest
from models.menu import DEFAULT_MENU_NAME, Menu
from routes.events import event_from_payload
from security.rbac import require_admin
from utils.audit import log_event
from utils.captcha import captcha_enabled, verify_captcha
from utils.emailer import email_configured, send_email
from utils.payloads import BookingRequestPayload, EventPayload, PayloadError

logger = logging.getLogger(__name__)

booking_bp = Blueprint("booking", __name__, url_prefix="/api")


def _email_parts(p: BookingRequestPayload):
    kind = p.business or "Personal"
    subject = f"New Booking Request - {p.name} ({kind})"
    text = "\n".join([
        f"Name: {p.name}",
        f"Business/Personal: {kind}",
        f"Town: {p.town}",
        f"Requested Date: {p.date}",
        f"Phone: {p.phone or '(none)'}",
        f"Email: {p.email or '(none)'}",
        "",
        "Description:",
        p.description or "(none)",
    ])
    html = (
        "<h2>New Booking Request</h2>"
        f"<p><strong>Name:</strong> {escape(p.name)}</p>"
        f"<p><strong>Business/Personal:</strong> {escape(kind)}</p>"
        f"<p><strong>Town:</strong> {escape(p.town)}</p>"
        f"<p><strong>Requested Date:</strong> {escape(p.date)}</p>"
        f"<p><strong>Phone:</strong> {escape(p.phone or '(none)')}</p>"
        f"<p><strong>Email:</strong> {escape(p.email or '(none)')}</p>"
        "<p><strong>Description:</strong></p>"
        f"<pre style=\"white-space:pre-wrap\">{escape(p.description or '(none)')}</pre>"
    )
    return subject, text, html


# ---------- PUBLIC: booking request ----------
@booking_bp.post("/book-request")
def submit_booking_request():
    try:
        payload = BookingRequestPayload.from_json(request.get_json(silent=True))
    except PayloadError as exc:
        return jsonify(error=str(exc)), 400

    if captcha_enabled():
        ok, err = verify_captcha(payload.captcha_token, remote_ip=request.remote_addr)
        if not ok:
            return jsonify(error=err), 400

    to_email = current_app.config.get("BOOK_TO_EMAIL")
    if not email_configured() or not to_email:
        return jsonify(error="Email transport not configured (SMTP_* env vars missing)."), 500

    # identical submissions are stored as separate requests
    row = BookingRequest(
        name=payload.name,
        business=payload.business or None,
        town=payload.town,
        date=payload.date,
        description=payload.description or None,
        phone=payload.phone or None,
        email=payload.email or None,
    )
    db.session.add(row)
    db.session.commit()

    subject, text, html = _email_parts(payload)
    sent, err = send_email(to_email, subject, text, html=html, reply_to=payload.email or None)
    if not sent:
        logger.error("booking request %s saved but email failed: %s", row.id, err)
        return jsonify(error=err or "Failed to send"), 500

    log_event("BOOKING_REQUEST_CREATE", entity="booking_request", entity_id=row.id, metadata={"town": payload.town, "date": payload.date})
    return jsonify(ok=True), 200


# ---------- ADMIN: triage requests ----------
@booking_bp.get("/booking-requests")
@require_admin
def list_booking_requests():
    rows = BookingRequest.query.order_by(BookingRequest.created_at.desc()).limit(200).all()
    return jsonify(requests=[r.to_dict() for r in rows]), 200


@booking_bp.delete("/booking-requests/<int:request_id>")
@require_admin
def remove_booking_request(request_id: int):
    row = db.session.get(BookingRequest, request_id)
    if not row:
        return jsonify(error="Request not found"), 404

    db.session.delete(row)
    db.session.commit()

    log_event("BOOKING_REQUEST_REMOVE", entity="booking_request", entity_id=request_id)
    return jsonify(success=True), 200


@booking_bp.post("/booking-requests/<int:request_id>/accept")
@require_admin
def accept_booking_request(request_id: int):
    """Turns a request into a calendar event on the requested day, then drops the request."""
    row = db.session.get(BookingRequest, request_id)
    if not row:
        return jsonify(error="Request not found"), 404

    data = request.get_json(silent=True) or {}
    data.setdefault("title", f"{row.business} ({row.name})" if row.business else row.name)
    data.setdefault("location", row.town)
    data["date"] = row.date
    if not data.get("menu_id"):
        default_menu = Menu.query.filter_by(name=DEFAULT_MENU_NAME).first()
        data["menu_id"] = default_menu.id if default_menu else None

    try:
        p = EventPayload.from_json(data)
    except PayloadError as exc:
        return jsonify(error=str(exc)), 400

    ev = event_from_payload(p)
    db.session.add(ev)
    db.session.delete(row)
    db.session.commit()

    log_event("BOOKING_REQUEST_ACCEPT", entity="event", entity_id=ev.id, metadata={"request_id": request_id})
    return jsonify(ev.to_dict()), 201
