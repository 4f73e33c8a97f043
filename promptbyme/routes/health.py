"""
API health check endpoint
"""
from flask import Blueprint, jsonify
from datetime import datetime
from sqlalchemy import text
from promptbyme.database import db

bp = Blueprint('health', __name__, url_prefix='/api')


@bp.route('/health', methods=['GET'])
def health_check():
    """Healthcheck - API is up and the database answers"""
    try:
        db.session.execute(text('SELECT 1'))

        return jsonify({
            'status': 'healthy',
            'message': 'API is online and database connection is working',
            'timestamp': datetime.utcnow().isoformat()
        }), 200

    except Exception as e:
        return jsonify({
            'status': 'unhealthy',
            'message': 'API is online but database connection failed',
            'error': str(e),
            'timestamp': datetime.utcnow().isoformat()
        }), 503
