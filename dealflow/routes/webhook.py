"""
Webhook routes — outreach dispatch, form ingestion, external automation events,
and the webhook log listing.

Every action appends a webhook_logs row after it succeeds; a failed action
returns early and leaves no log.
"""
import logging
from datetime import datetime, timezone
from urllib.parse import urlparse

from flask import Blueprint, request, jsonify, g

from dealflow.auth import require_auth, check_webhook_secret
from dealflow.config import get_settings
from dealflow.errors import ServiceUnavailableError, ValidationError
from dealflow.models.webhook_log import (
    ACTION_SEND_OUTREACH, ACTION_FORM_SUBMISSION,
    ACTION_OUTREACH_EXTERNAL, ACTION_TRIGGER_OUTREACH,
)
from dealflow.services.deals import get_deal, create_deal
from dealflow.services.outreach import send_outreach_email, build_forward_payload, forward_outreach
from dealflow.services.webhook_log import record_webhook, list_recent_logs

logger = logging.getLogger('routes.webhook')

bp = Blueprint('webhook', __name__)

FORM_ACTOR = 'google_form'
EXTERNAL_ACTOR = 'external_webhook'


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _require_deal_id(data):
    deal_id = data.get('dealId')
    if deal_id in (None, ''):
        raise ValidationError('dealId is required')
    return str(deal_id)


def _validate_webhook_url(url):
    if not isinstance(url, str):
        raise ValidationError('webhookUrl must be a string')
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise ValidationError('webhookUrl must be an http(s) URL')
    return url


@bp.route('/api/webhook/send-outreach', methods=['POST'])
@require_auth
def send_outreach():
    """Email the deal's contact through the SMTP relay."""
    settings = get_settings()
    if not settings.mail_configured:
        raise ServiceUnavailableError('Email service not configured')

    deal_id = _require_deal_id(_json_body())
    deal = get_deal(deal_id)
    recipient = send_outreach_email(deal, settings)

    record_webhook(
        ACTION_SEND_OUTREACH,
        triggered_by=g.user.email,
        deal_id=deal['id'],
        details={'email_sent_to': recipient},
    )
    return jsonify({'message': 'Outreach email sent successfully'})


@bp.route('/api/webhook/google-form', methods=['POST'])
def google_form():
    """Unauthenticated form submission → new deal."""
    data = _json_body()
    deal = create_deal(data, overrides={'source': 'google_form', 'stage': 'submitted'})

    record_webhook(ACTION_FORM_SUBMISSION, triggered_by=FORM_ACTOR, deal_id=deal['id'])
    return jsonify({'message': 'Deal created from form', 'data': deal}), 201


@bp.route('/api/webhook/outreach-external', methods=['POST'])
def outreach_external():
    """Log and echo an event from an external automation tool."""
    check_webhook_secret(get_settings().webhook_secret)

    data = _json_body()
    received_at = datetime.now(timezone.utc).isoformat()

    # No deal existence check: the reported dealId is kept in details only
    record_webhook(
        ACTION_OUTREACH_EXTERNAL,
        triggered_by=EXTERNAL_ACTOR,
        status=str(data.get('status') or 'received'),
        details={'payload': data, 'reported_deal_id': data.get('dealId')},
        strict=True,
    )
    return jsonify({
        'message': 'Webhook received',
        'received': data,
        'timestamp': received_at,
    })


@bp.route('/api/webhook/trigger-outreach', methods=['POST'])
@require_auth
def trigger_outreach():
    """Forward the deal to an automation webhook, if one is given."""
    data = _json_body()
    deal_id = _require_deal_id(data)
    webhook_url = data.get('webhookUrl')
    if webhook_url:
        webhook_url = _validate_webhook_url(webhook_url)

    deal = get_deal(deal_id)

    response_status = None
    if webhook_url:
        payload = build_forward_payload(deal, g.user.email)
        response_status = forward_outreach(webhook_url, payload, get_settings().webhook_secret)

    record_webhook(
        ACTION_TRIGGER_OUTREACH,
        triggered_by=g.user.email,
        deal_id=deal['id'],
        details={
            'webhook_url': webhook_url,
            'forwarded': bool(webhook_url),
            'response_status': response_status,
        },
    )
    return jsonify({
        'message': 'Outreach triggered',
        'forwarded': bool(webhook_url),
        'deal': deal,
    })


@bp.route('/api/webhooks')
@require_auth
def webhooks_list():
    """Last 50 log rows, newest first, joined with their deal."""
    return jsonify(list_recent_logs())
