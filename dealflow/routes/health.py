"""
Health route — liveness plus which integrations are configured.
"""
from datetime import datetime, timezone
from flask import Blueprint, jsonify

from dealflow.config import get_settings

bp = Blueprint('health', __name__)


@bp.route('/api/health')
def health():
    settings = get_settings()
    return jsonify({
        'status': 'ok',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'config': {
            'database': settings.database_configured,
            'identity_provider': settings.identity_configured,
            'mail': settings.mail_configured,
            'webhook_secret': settings.webhook_secret_configured,
        },
    })
