from datetime import datetime, timedelta

from conftest import bearer
from models import db
from models.event import Event
from models.menu import Menu
from utils.calendar import day_counts, event_presets, pick_current_event

ADMIN = bearer("owner@example.com")


def _event(date_str, title="Lunch", start=None, end=None, created_at=None, **kw):
    ev = Event(date_str=date_str, title=title, start_time=start, end_time=end, **kw)
    if created_at:
        ev.created_at = created_at
    db.session.add(ev)
    db.session.commit()
    return ev


# ---------- calendar helpers ----------
def test_day_counts_uses_month_prefix(app) -> None:
    for d in ("2025-05-01", "2025-05-01", "2025-05-17", "2025-06-01", "2024-05-01"):
        _event(d)

    assert day_counts(Event.query.all(), 2025, 5) == {"2025-05-01": 2, "2025-05-17": 1}
    assert day_counts(Event.query.all(), 2025, 7) == {}


def test_pick_current_event_prefers_ongoing(app) -> None:
    breakfast = _event("2025-05-01", "Breakfast", "7:00 AM", "10:00 AM")
    lunch = _event("2025-05-01", "Lunch", "11:00 AM", "2:00 PM")
    dinner = _event("2025-05-01", "Dinner", "5:00 PM", "9:00 PM")
    events = [breakfast, lunch, dinner]

    assert pick_current_event(events, 12 * 60) is lunch
    assert pick_current_event(events, 15 * 60) is dinner
    assert pick_current_event(events, 22 * 60) is breakfast
    assert pick_current_event([], 12 * 60) is None


def test_pick_current_event_skips_unparseable_times(app) -> None:
    odd = _event("2025-05-01", "Pop-up", "noon", "late")
    lunch = _event("2025-05-01", "Lunch", "11:00 AM", "2:00 PM")
    assert pick_current_event([odd, lunch], 10 * 60) is lunch
    assert pick_current_event([odd, lunch], 23 * 60) is odd


def test_presets_take_latest_per_title(app) -> None:
    old = datetime(2025, 1, 1)
    _event("2025-01-01", "Brewery", location="Old Town", created_at=old)
    _event("2025-02-01", "Brewery", location="New Town", created_at=old + timedelta(days=30))
    _event("2025-02-02", "apple fest", location="Orchard", created_at=old)

    presets = event_presets(Event.query.all())
    assert [p["title"] for p in presets] == ["apple fest", "Brewery"]
    assert presets[1]["last"]["location"] == "New Town"


# ---------- public reads ----------
def test_list_events_by_date(client) -> None:
    _event("2025-05-01", "Lunch")
    _event("2025-05-02", "Dinner")
    _event("2025-05-01", "Hidden", is_published=False)

    resp = client.get("/api/events?date=2025-05-01")
    assert resp.status_code == 200
    assert [e["title"] for e in resp.get_json()["events"]] == ["Lunch"]

    resp = client.get("/api/events")
    assert len(resp.get_json()["events"]) == 2


def test_list_events_rejects_bad_date(client) -> None:
    assert client.get("/api/events?date=05/01/2025").status_code == 400


def test_counts_endpoint(client) -> None:
    _event("2025-05-01")
    _event("2025-05-01")
    resp = client.get("/api/events/counts?year=2025&month=5")
    assert resp.status_code == 200
    assert resp.get_json() == {"counts": {"2025-05-01": 2}}

    assert client.get("/api/events/counts?year=2025&month=13").status_code == 400
    assert client.get("/api/events/counts").status_code == 400


def test_today_endpoint(client) -> None:
    resp = client.get("/api/events/today?date=2025-05-01")
    assert resp.get_json() == {"event": None}

    _event("2025-05-01", "Lunch")
    resp = client.get("/api/events/today?date=2025-05-01")
    assert resp.get_json()["event"]["title"] == "Lunch"


# ---------- admin writes ----------
def test_create_event_normalizes_times(client) -> None:
    resp = client.post(
        "/api/events",
        json={
            "date": "2025-05-01",
            "title": "Lunch at the Brewery",
            "location": "Peoria",
            "start_time": "11am",
            "end_time": "1330",
            "maps_url": "https://maps.example/brewery",
            "maps_label": "Brewery",
            "maps_provider": "openstreetmap",
            "maps_coords": {"lat": 40.69, "lng": -89.59},
        },
        headers=ADMIN,
    )
    assert resp.status_code == 201
    ev = resp.get_json()
    assert ev["start_time"] == "11:00 AM"
    assert ev["end_time"] == "1:30 PM"
    assert ev["maps_coords"] == {"lat": 40.69, "lng": -89.59}
    assert ev["maps_provider"] == "openstreetmap"


def test_create_event_validation(client) -> None:
    assert client.post("/api/events", json={"title": "x"}, headers=ADMIN).status_code == 400
    assert client.post("/api/events", json={"date": "2025-13-01", "title": "x"}, headers=ADMIN).status_code == 400
    resp = client.post(
        "/api/events",
        json={"date": "2025-05-01", "title": "x", "maps_provider": "bing", "maps_coords": {"lat": 1, "lng": 2}},
        headers=ADMIN,
    )
    assert resp.status_code == 400


def test_create_event_with_unknown_menu_is_404(client) -> None:
    resp = client.post("/api/events", json={"date": "2025-05-01", "title": "x", "menu_id": 42}, headers=ADMIN)
    assert resp.status_code == 404


def test_create_event_requires_auth(client) -> None:
    assert client.post("/api/events", json={"date": "2025-05-01", "title": "x"}).status_code == 401


def test_update_event_only_touches_supplied_fields(client) -> None:
    menu = Menu(name="Fall", sections=[])
    db.session.add(menu)
    db.session.commit()
    ev = _event("2025-05-01", "Lunch", "11:00 AM", "2:00 PM", location="Peoria")

    resp = client.put(f"/api/events/{ev.id}", json={"end_time": "3pm", "menu_id": menu.id}, headers=ADMIN)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["start_time"] == "11:00 AM"
    assert body["end_time"] == "3:00 PM"
    assert body["location"] == "Peoria"
    assert body["menu_id"] == menu.id


def test_update_missing_event_is_404(client) -> None:
    assert client.put("/api/events/999", json={"title": "x"}, headers=ADMIN).status_code == 404


def test_delete_event(client) -> None:
    ev = _event("2025-05-01")
    assert client.delete(f"/api/events/{ev.id}", headers=ADMIN).status_code == 200
    assert Event.query.count() == 0
    assert client.delete(f"/api/events/{ev.id}", headers=ADMIN).status_code == 404


def test_presets_endpoint(client) -> None:
    _event("2025-05-01", "Brewery", location="Peoria")
    resp = client.get("/api/events/presets", headers=ADMIN)
    assert resp.status_code == 200
    assert resp.get_json()["presets"][0]["last"]["location"] == "Peoria"


def test_today_endpoint_takes_explicit_time(client) -> None:
    _event("2025-05-01", "Breakfast", "7:00 AM", "10:00 AM")
    _event("2025-05-01", "Lunch", "11:00 AM", "2:00 PM")

    resp = client.get("/api/events/today?date=2025-05-01&time=12:30")
    assert resp.get_json()["event"]["title"] == "Lunch"
    resp = client.get("/api/events/today?date=2025-05-01&time=8am")
    assert resp.get_json()["event"]["title"] == "Breakfast"
    resp = client.get("/api/events/today?date=2025-05-01&time=1030")
    assert resp.get_json()["event"]["title"] == "Lunch"

    assert client.get("/api/events/today?date=2025-05-01&time=teatime").status_code == 400
    assert client.get("/api/events/today?date=May-1").status_code == 400
