# ------- laundrydesk/utils/decorators.py -------
from functools import wraps
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from ..context import RequestContext
from ..extensions import db
from ..model import User
from .api import err

def _current_user():
    verify_jwt_in_request()
    uid = get_jwt_identity()
    try:
        uid = int(uid)
    except (TypeError, ValueError):
        uid = None
    return db.session.get(User, uid) if uid else None

def permission_required(*permissions, message: str | None = None):
    """Authenticate, check role permissions and inject ``ctx`` (RequestContext)."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            u = _current_user()
            if not u or not u.is_active:
                return err("Unauthorized", 401)
            ctx = RequestContext.for_user(u)
            missing = [p for p in permissions if not ctx.can(p)]
            if missing:
                return err(message or f"Forbidden: requires {', '.join(missing)}", 403)
            return fn(*args, ctx=ctx, **kwargs)
        return wrapper
    return decorator

def login_required(fn):
    return permission_required()(fn)
