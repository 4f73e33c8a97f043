import logging

from flask import Flask
from flask_cors import CORS
from flask_migrate import Migrate
from promptbyme.config import Config
from promptbyme.database import db, init_db

def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=logging.DEBUG if app.config.get('DEBUG') else logging.INFO,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )

    # CORS - functions are called from the browser and from API clients
    origins = app.config.get('CORS_ORIGINS', '*')
    if origins != '*':
        origins = [origin.strip() for origin in origins.split(',') if origin.strip()]

    CORS(app,
         resources={r"/functions/*": {"origins": origins}, r"/api/*": {"origins": origins}},
         supports_credentials=False,  # Bearer tokens, no cookies
         send_wildcard=origins == '*',
         allow_headers=["Content-Type", "Authorization"],
         methods=["GET", "POST", "OPTIONS"])

    # Database
    db.init_app(app)

    Migrate(app, db)

    init_db(app)

    # Flow execution (web app)
    from promptbyme.routes import prompt_flows
    app.register_blueprint(prompt_flows.prompt_flows_bp)

    # Public API (pbm API keys)
    from promptbyme.routes import public_api
    app.register_blueprint(public_api.public_api_bp)

    # Health check endpoint
    from promptbyme.routes import health
    app.register_blueprint(health.bp)

    return app
