from flask import Blueprint

bp = Blueprint("cash", __name__, url_prefix="/cash")

from . import routes  # noqa: E402,F401
