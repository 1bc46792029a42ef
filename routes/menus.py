import logging
import time

from flask import Blueprint, jsonify, request

from models import db
from models.event import Event
from models.menu import Menu
from security.rbac import require_admin
from services import ServiceError, get_images
from utils.audit import log_event
from utils.auth_context import token_required
from utils.menus import MenuLookupError, image_object_path, locate_item, order_menus
from utils.payloads import PayloadError, dump_sections, parse_sections

logger = logging.getLogger(__name__)

menus_bp = Blueprint("menus", __name__, url_prefix="/api")


# ---------- PUBLIC ----------
@menus_bp.get("/menus")
def list_menus():
    rows = Menu.query.order_by(Menu.created_at.asc()).all()
    return jsonify(menus=[m.to_dict() for m in order_menus(rows)]), 200


@menus_bp.get("/menus/<int:menu_id>")
def get_menu(menu_id: int):
    menu = db.session.get(Menu, menu_id)
    if not menu:
        return jsonify(error="Menu not found"), 404
    return jsonify(menu.to_dict()), 200


# ---------- ADMIN: menu documents ----------
@menus_bp.post("/menus")
@require_admin
def create_menu():
    data = request.get_json(silent=True) or {}
    name = (data.get("name") or "").strip()
    if not name:
        return jsonify(error="Menu name required"), 400
    try:
        sections = parse_sections(data.get("sections"))
    except PayloadError as exc:
        return jsonify(error=str(exc)), 400

    menu = Menu(name=name, sections=dump_sections(sections))
    db.session.add(menu)
    db.session.commit()

    log_event("MENU_CREATE", entity="menu", entity_id=menu.id)
    return jsonify(menu.to_dict()), 201


@menus_bp.put("/menus/<int:menu_id>")
@require_admin
def update_menu(menu_id: int):
    menu = db.session.get(Menu, menu_id)
    if not menu:
        return jsonify(error="Menu not found"), 404

    data = request.get_json(silent=True) or {}
    if "name" in data:
        name = (data.get("name") or "").strip()
        if not name:
            return jsonify(error="Menu name required"), 400
        menu.name = name
    if "sections" in data:
        try:
            menu.sections = dump_sections(parse_sections(data.get("sections")))
        except PayloadError as exc:
            return jsonify(error=str(exc)), 400

    db.session.commit()
    log_event("MENU_UPDATE", entity="menu", entity_id=menu.id)
    return jsonify(menu.to_dict()), 200


@menus_bp.delete("/menus/<int:menu_id>")
@require_admin
def delete_menu(menu_id: int):
    menu = db.session.get(Menu, menu_id)
    if not menu:
        return jsonify(error="Menu not found"), 404

    # events keep their slot on the calendar, just without a menu
    Event.query.filter_by(menu_id=menu_id).update({"menu_id": None})
    db.session.delete(menu)
    db.session.commit()

    log_event("MENU_DELETE", entity="menu", entity_id=menu_id)
    return jsonify(success=True), 200


# ---------- any signed-in user: item photos ----------
def _load_item(menu_id, section_id, item_id):
    """Returns (menu, sections, item) or an error response tuple."""
    menu = db.session.get(Menu, menu_id) if str(menu_id).isdigit() else None
    if not menu:
        return None, (jsonify(error="Menu not found"), 404)
    try:
        sections, item = locate_item(menu, section_id, item_id)
    except MenuLookupError as exc:
        return None, (jsonify(error=str(exc)), 404)
    except PayloadError as exc:
        logger.error("menu %s has malformed sections: %s", menu_id, exc)
        return None, (jsonify(error="Menu data is malformed"), 500)
    return (menu, sections, item), None


@menus_bp.post("/admin/upload-menu-image")
@token_required
def upload_menu_image():
    menu_id = request.form.get("menuId")
    section_id = request.form.get("sectionId")
    item_id = request.form.get("itemId")
    upload = request.files.get("file")
    if not menu_id or not section_id or not item_id or upload is None:
        return jsonify(error="Missing required fields"), 400

    found, failure = _load_item(menu_id, section_id, item_id)
    if failure:
        return failure
    menu, sections, item = found

    # same object path on re-upload, so the old image is overwritten in place
    object_path = image_object_path(menu.id, item, upload.filename)
    url = get_images().upload(object_path, upload.read(), upload.mimetype or "application/octet-stream")

    item.photo_url = url
    item.photo_path = object_path
    item.photo_updated_at = int(time.time() * 1000)
    menu.sections = dump_sections(sections)
    db.session.commit()

    log_event("MENU_IMAGE_UPLOAD", entity="menu", entity_id=menu.id, metadata={"item_id": item.id, "path": object_path})
    return jsonify(url=url, objectPath=object_path, item=item.to_json()), 200


@menus_bp.post("/admin/delete-menu-image")
@token_required
def delete_menu_image():
    data = request.get_json(silent=True) or {}
    menu_id = data.get("menuId")
    section_id = data.get("sectionId")
    item_id = data.get("itemId")
    if not menu_id or not section_id or not item_id:
        return jsonify(error="Missing required fields"), 400

    found, failure = _load_item(menu_id, section_id, item_id)
    if failure:
        return failure
    menu, sections, item = found

    if item.photo_path:
        try:
            get_images().delete(item.photo_path)
        except ServiceError as exc:
            logger.warning("menu image %s not deleted: %s", item.photo_path, exc)

    item.photo_url = None
    item.photo_path = None
    item.photo_updated_at = None
    menu.sections = dump_sections(sections)
    db.session.commit()

    log_event("MENU_IMAGE_DELETE", entity="menu", entity_id=menu.id, metadata={"item_id": item.id})
    return jsonify(ok=True, item=item.to_json()), 200
