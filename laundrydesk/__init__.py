import logging

from flask import Flask, jsonify

from .config import Config
from .extensions import db, jwt, cors, migrate


def create_app(config_class=Config):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)
    config_class.init_app(app)
    app.json.sort_keys = False

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)
    cors.init_app(app, resources={r"/*": {"origins": "*"}}, expose_headers=["X-Receipt-Number"])
    migrate.init_app(app, db)

    # Register blueprints
    from .auth import bp as auth_bp; app.register_blueprint(auth_bp)
    from .orders import bp as orders_bp; app.register_blueprint(orders_bp)
    from .receipts import bp as receipts_bp; app.register_blueprint(receipts_bp)
    from .customers import bp as customers_bp; app.register_blueprint(customers_bp)
    from .loyalty import bp as loyalty_bp; app.register_blueprint(loyalty_bp)
    from .cash import bp as cash_bp; app.register_blueprint(cash_bp)
    from .pricelist import bp as pricelist_bp; app.register_blueprint(pricelist_bp)
    from .expenses import bp as expenses_bp; app.register_blueprint(expenses_bp)
    from .bills import bp as bills_bp; app.register_blueprint(bills_bp)
    from .reports import bp as reports_bp; app.register_blueprint(reports_bp)

    from .errors import register_error_handlers
    register_error_handlers(app)

    from .cli import register_cli
    register_cli(app)

    @app.get("/")
    def health():
        return jsonify(ok=True, msg="API running")

    with app.app_context():
        from . import model  # noqa: F401
        db.create_all()
        app.logger.debug("routes: %s", sorted(r.rule for r in app.url_map.iter_rules()))

    return app
