from utils.timefmt import parse_canonical_minutes


def month_prefix(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def day_counts(events, year: int, month: int) -> dict:
    """
    Events per day for one month. Works off a full scan of events, keeping
    those whose date string starts with YYYY-MM.
    """
    prefix = month_prefix(year, month)
    counts = {}
    for ev in events:
        day = ev.date_str
        if isinstance(day, str) and day.startswith(prefix):
            counts[day] = counts.get(day, 0) + 1
    return counts


def pick_current_event(events, now_minutes: int):
    """Ongoing event, else the next one to start, else the first of the day."""
    if not events:
        return None

    windows = [(ev, parse_canonical_minutes(ev.start_time), parse_canonical_minutes(ev.end_time)) for ev in events]

    for ev, start, end in windows:
        if start is not None and end is not None and start <= now_minutes <= end:
            return ev

    upcoming = [(start, ev) for ev, start, _ in windows if start is not None and now_minutes < start]
    if upcoming:
        upcoming.sort(key=lambda pair: pair[0])
        return upcoming[0][1]

    return events[0]


def event_presets(events) -> list:
    """
    One preset per distinct title, taken from that title's most recently
    created event, sorted by title.
    """
    latest = {}
    for ev in events:
        title = (ev.title or "").strip()
        if not title:
            continue
        if title not in latest or (ev.created_at and latest[title].created_at and ev.created_at >= latest[title].created_at):
            latest[title] = ev

    out = []
    for title in sorted(latest, key=str.lower):
        ev = latest[title]
        out.append({
            "title": title,
            "last": {
                "location": ev.location or "",
                "start_time": ev.start_time or "",
                "end_time": ev.end_time or "",
                "menu_id": ev.menu_id,
                "maps_url": ev.maps_url or "",
                "maps_label": ev.maps_label or "",
                "maps_provider": ev.maps_provider,
            },
        })
    return out
