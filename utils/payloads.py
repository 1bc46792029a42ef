"""
Typed request bodies and menu documents. JSON is decoded into these at the
edge of each route; anything malformed becomes a PayloadError (400) instead
of silently missing fields further in.
"""
import re
import uuid
from dataclasses import asdict, dataclass, field
from datetime import date

from utils.geocoding import MAP_PROVIDERS
from utils.timefmt import normalize_time

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class PayloadError(ValueError):
    pass


def _text(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _iso_day(value: str, label: str) -> str:
    try:
        date.fromisoformat(value)
    except ValueError:
        raise PayloadError(f"Invalid {label}. Use YYYY-MM-DD")
    return value


@dataclass
class BookingRequestPayload:
    name: str
    town: str
    date: str
    business: str = ""
    description: str = ""
    phone: str = ""
    email: str = ""
    captcha_token: str = ""

    @classmethod
    def from_json(cls, data):
        if not isinstance(data, dict):
            raise PayloadError("Missing required fields")
        payload = cls(
            name=_text(data, "name"),
            town=_text(data, "town"),
            date=_text(data, "date"),
            business=_text(data, "business"),
            description=_text(data, "description"),
            phone=_text(data, "phone"),
            email=_text(data, "email"),
            captcha_token=_text(data, "captchaToken"),
        )
        if not payload.name or not payload.town or not payload.date:
            raise PayloadError("Missing required fields")
        if not payload.phone and not payload.email:
            raise PayloadError("Please provide either a phone number or email so we can reach you.")
        if payload.email and not EMAIL_RE.match(payload.email):
            raise PayloadError("Please provide a valid email address (e.g., you@example.com).")
        return payload


@dataclass
class EventPayload:
    date: str
    title: str
    location: str = ""
    start_time: str = ""
    end_time: str = ""
    menu_id: int = None
    maps_url: str = ""
    maps_label: str = ""
    maps_provider: str = None
    lat: float = None
    lng: float = None
    is_published: bool = True

    @classmethod
    def from_json(cls, data, partial: bool = False):
        """
        partial=True is for updates: only date/title presence checks are
        skipped, every supplied field is still validated.
        """
        if not isinstance(data, dict):
            raise PayloadError("JSON body required")

        day = _text(data, "date")
        title = _text(data, "title")
        if not partial and (not day or not title):
            raise PayloadError("date and title are required")
        if day:
            _iso_day(day, "date")

        menu_id = data.get("menu_id")
        if menu_id in ("", None):
            menu_id = None
        else:
            try:
                menu_id = int(menu_id)
            except (TypeError, ValueError):
                raise PayloadError("menu_id must be an integer")

        provider = data.get("maps_provider") or None
        if provider is not None and provider not in MAP_PROVIDERS:
            raise PayloadError(f"maps_provider must be one of {', '.join(MAP_PROVIDERS)}")

        lat = lng = None
        coords = data.get("maps_coords")
        if coords:
            try:
                lat = float(coords["lat"])
                lng = float(coords["lng"])
            except (KeyError, TypeError, ValueError):
                raise PayloadError("maps_coords must be {lat, lng}")

        maps_url = _text(data, "maps_url")
        return cls(
            date=day,
            title=title,
            location=_text(data, "location"),
            start_time=normalize_time(_text(data, "start_time")),
            end_time=normalize_time(_text(data, "end_time")),
            menu_id=menu_id,
            maps_url=maps_url,
            maps_label=_text(data, "maps_label") if maps_url else "",
            maps_provider=provider if lat is not None else None,
            lat=lat,
            lng=lng,
            is_published=bool(data.get("is_published", True)),
        )


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class MenuItem:
    id: str
    name: str
    desc: str = ""
    price: str = ""
    photo_url: str = None
    photo_path: str = None
    photo_updated_at: int = None

    @classmethod
    def from_json(cls, data):
        if not isinstance(data, dict):
            raise PayloadError("menu item must be an object")
        name = _text(data, "name")
        if not name:
            raise PayloadError("menu item name is required")
        return cls(
            id=_text(data, "id") or _new_id(),
            name=name,
            desc=_text(data, "desc"),
            price=_text(data, "price"),
            photo_url=data.get("photo_url") or None,
            photo_path=data.get("photo_path") or None,
            photo_updated_at=data.get("photo_updated_at") or None,
        )

    def to_json(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class MenuSection:
    id: str
    title: str
    items: list = field(default_factory=list)

    @classmethod
    def from_json(cls, data):
        if not isinstance(data, dict):
            raise PayloadError("menu section must be an object")
        title = _text(data, "title")
        if not title:
            raise PayloadError("menu section title is required")
        items = data.get("items") or []
        if not isinstance(items, list):
            raise PayloadError("menu section items must be a list")
        return cls(
            id=_text(data, "id") or _new_id(),
            title=title,
            items=[MenuItem.from_json(i) for i in items],
        )

    def to_json(self) -> dict:
        return {"id": self.id, "title": self.title, "items": [i.to_json() for i in self.items]}


def parse_sections(raw) -> list:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise PayloadError("sections must be a list")
    return [MenuSection.from_json(s) for s in raw]


def dump_sections(sections: list) -> list:
    return [s.to_json() for s in sections]
