# laundrydesk/auth/routes.py
from flask import current_app, request
from flask_jwt_extended import create_access_token

from . import bp
from ..extensions import db
from ..model import User
from ..utils.api import err, ok
from ..utils.dates import utcnow
from ..utils.decorators import login_required


@bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    username = (data.get("username") or "").strip().lower()
    password = data.get("password") or ""
    if not username or not password:
        return err("Username and password are required", 400)

    user = User.query.filter_by(username=username).first()
    if not user or not user.check_password(password):
        current_app.logger.info("failed login for %s", username)
        return err("Invalid username or password", 401)
    if not user.is_active:
        return err("Account is disabled", 403)

    token = create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role, "branch_id": user.branch_id},
    )
    user.last_login = utcnow()
    db.session.commit()

    return ok("You've logged in successfully", {"user": user.as_dict(), "token": token})


@bp.get("/me")
@login_required
def me(ctx):
    user = db.session.get(User, ctx.user_id)
    return ok("me", {"user": user.as_dict()})
