import re

_CLOCK_RE = re.compile(r"^(\d{1,2})(?:[:.](\d{2}))?(am|pm)?$", re.ASCII)
_DIGITS_RE = re.compile(r"^(\d{3,4})(am|pm)?$", re.ASCII)
_CANONICAL_RE = re.compile(r"^(\d{1,2}):(\d{2})\s*([AP]M)$", re.IGNORECASE | re.ASCII)


def normalize_time(text: str) -> str:
    """
    Turn loose time text ("1pm", "130pm", "1:30 pm", "13", "1330") into
    "h:mm AM/PM". Anything that can't be read comes back trimmed but
    otherwise untouched.
    """
    raw = (text or "").strip()
    if not raw:
        return ""
    collapsed = re.sub(r"\s+", "", raw.lower())

    m = _CLOCK_RE.match(collapsed)
    if m:
        hour = int(m.group(1))
        minute = int(m.group(2)) if m.group(2) else 0
        suffix = m.group(3).upper() if m.group(3) else None
    else:
        m = _DIGITS_RE.match(collapsed)
        if not m:
            return raw
        # 130 -> 1:30, 1330 -> 13:30, 130pm -> 1:30 PM
        digits = m.group(1)
        hour = int(digits[:-2])
        minute = int(digits[-2:])
        suffix = m.group(2).upper() if m.group(2) else None

    if hour > 23 or minute > 59:
        return raw

    if suffix:
        if hour < 1 or hour > 12:
            return raw
        return f"{hour}:{minute:02d} {suffix}"

    if hour == 0:
        return f"12:{minute:02d} AM"
    if hour == 12:
        return f"12:{minute:02d} PM"
    if hour > 12:
        return f"{hour - 12}:{minute:02d} PM"
    return f"{hour}:{minute:02d} AM"


def parse_canonical_minutes(text: str):
    """Minutes after midnight for a canonical "h:mm AM/PM" string, else None."""
    if not isinstance(text, str):
        return None
    m = _CANONICAL_RE.match(text.strip())
    if not m:
        return None
    hour = int(m.group(1))
    minute = int(m.group(2))
    meridiem = m.group(3).upper()
    if meridiem == "PM" and hour != 12:
        hour += 12
    if meridiem == "AM" and hour == 12:
        hour = 0
    return hour * 60 + minute
