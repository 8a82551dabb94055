from flask import Blueprint

bp = Blueprint("pricelist", __name__, url_prefix="/price-list")

from . import routes  # noqa: E402,F401
