import logging

from flask import Flask
from flask_cors import CORS

from .config import Config
from .extensions import db
from .routes import remedial_bp

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(format=LOG_FORMAT, level=app.config.get("LOG_LEVEL", "INFO"))

    # Extensions
    db.init_app(app)
    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    # Blueprints
    app.register_blueprint(remedial_bp, url_prefix="/api/remedial")

    with app.app_context():
        db.create_all()

    @app.route("/health")
    def health():
        return {"status": "ok"}

    return app


if __name__ == "__main__":
    app = create_app()

    app.run(debug=True)
