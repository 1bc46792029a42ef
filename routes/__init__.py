from .health import health_bp
from .admin import admin_bp
from .booking import booking_bp
from .events import events_bp
from .menus import menus_bp
from .gcp import gcp_bp
from .social import social_bp
from .places import places_bp
