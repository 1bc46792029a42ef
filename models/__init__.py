from .db import db
from .audit_log import AuditLog
from .login_failure import LoginFailure
from .admin_email import AdminEmail
from .project_member import ProjectMember
from .menu import Menu, DEFAULT_MENU_NAME
from .event import Event
from .booking_request import BookingRequest
