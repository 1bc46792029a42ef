from models.menu import DEFAULT_MENU_NAME
from utils.payloads import parse_sections


class MenuLookupError(LookupError):
    pass


def locate_item(menu, section_id: str, item_id: str):
    """
    Parses the menu's stored sections and finds one item.
    Returns (sections, item); raises MenuLookupError naming what is missing.
    """
    sections = parse_sections(menu.sections or [])
    section = next((s for s in sections if s.id == section_id), None)
    if section is None:
        raise MenuLookupError("Section not found")
    item = next((i for i in section.items if i.id == item_id), None)
    if item is None:
        raise MenuLookupError("Item not found")
    return sections, item


def image_object_path(menu_id, item, filename: str) -> str:
    """Re-uses the item's existing object path so a new upload overwrites it."""
    if item.photo_path:
        return item.photo_path
    ext = (filename.rsplit(".", 1)[-1] if "." in (filename or "") else "jpg").lower() or "jpg"
    return f"menu-images/{menu_id}/{item.id}.{ext}"


def order_menus(menus: list) -> list:
    """The default menu first, the rest in their given order."""
    first = [m for m in menus if m.name == DEFAULT_MENU_NAME]
    rest = [m for m in menus if m.name != DEFAULT_MENU_NAME]
    return first + rest
