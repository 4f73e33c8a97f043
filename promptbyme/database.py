from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def init_db(app):
    """Create tables for local/test databases; production schema is managed by migrations"""
    with app.app_context():
        # Import models so they are registered on the metadata
        from promptbyme import models  # noqa: F401

        if app.config.get('TESTING') or app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite'):
            db.create_all()
