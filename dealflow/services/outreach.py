"""
Outreach dispatcher — SMTP email for a deal, or a forward to an automation webhook.

Delivery failures raise UpstreamError; callers only log after a clean return.
"""
import logging
import smtplib
import ssl
from datetime import datetime, timezone
from email.message import EmailMessage
from typing import Dict, Optional

import requests
from flask import render_template_string

from dealflow.errors import ServiceUnavailableError, UpstreamError, ValidationError

logger = logging.getLogger('services.outreach')

OUTREACH_TEMPLATE = '''
<h2>{{ sender_name }} - Deal Outreach</h2>
<p>Dear {{ deal.contact_name or 'there' }},</p>
<p>We're interested in learning more about {{ deal.business_name }}.</p>
<p><strong>Details:</strong></p>
<ul>
  <li>Business: {{ deal.business_name }}</li>
  <li>Industry: {{ deal.industry or 'N/A' }}</li>
  <li>Funding Requested: {{ funding }}</li>
</ul>
<p>Best regards,<br>{{ sender_name }} Team</p>
'''

SMTP_TIMEOUT = 30
WEBHOOK_TIMEOUT = 10


def format_funding(amount) -> str:
    if amount is None:
        return 'N/A'
    try:
        return f"${float(amount):,.0f}"
    except (TypeError, ValueError):
        return str(amount)


def outreach_subject(deal: Dict) -> str:
    # Header values must be a single line
    name = ' '.join(str(deal.get('business_name') or '').split())
    return f"Investment Opportunity: {name}"


def render_outreach_html(deal: Dict, sender_name: str) -> str:
    """Render the outreach body. Deal values are HTML-escaped."""
    return render_template_string(
        OUTREACH_TEMPLATE,
        deal=deal,
        funding=format_funding(deal.get('funding_amount_requested')),
        sender_name=sender_name,
    )


def send_outreach_email(deal: Dict, settings) -> str:
    """Send the templated email to the deal's contact. Returns the recipient."""
    if not settings.mail_configured:
        raise ServiceUnavailableError('Email service not configured')

    recipient = deal.get('contact_email')
    if not recipient:
        raise ValidationError('Deal has no contact email')

    msg = EmailMessage()
    msg['Subject'] = outreach_subject(deal)
    msg['From'] = settings.smtp_from
    try:
        msg['To'] = recipient
    except ValueError:
        raise ValidationError('Deal has an invalid contact email')
    msg.set_content(f"{settings.outreach_sender_name} is interested in {deal.get('business_name')}.")
    msg.add_alternative(render_outreach_html(deal, settings.outreach_sender_name), subtype='html')

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=SMTP_TIMEOUT) as server:
            if settings.smtp_starttls:
                server.starttls(context=ssl.create_default_context())
            server.login(settings.smtp_user, settings.smtp_password)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error("Failed to send outreach for deal %s: %s", deal.get('id'), e)
        raise UpstreamError(str(e) or 'Failed to send email')

    logger.info("Outreach email for deal %s sent to %s", deal.get('id'), recipient)
    return recipient


def build_forward_payload(deal: Dict, triggered_by: Optional[str]) -> Dict:
    """Normalized deal payload for external automation tools."""
    return {
        'deal_id': deal.get('id'),
        'business_name': deal.get('business_name'),
        'contact_name': deal.get('contact_name'),
        'contact_email': deal.get('contact_email'),
        'industry': deal.get('industry'),
        'funding_amount_requested': deal.get('funding_amount_requested'),
        'description': deal.get('description'),
        'website_url': deal.get('website_url'),
        'stage': deal.get('stage'),
        'source': deal.get('source'),
        'triggered_by': triggered_by,
        'triggered_at': datetime.now(timezone.utc).isoformat(),
    }


def forward_outreach(webhook_url: str, payload: Dict, secret: Optional[str] = None) -> int:
    """POST payload to webhook_url. Non-2xx is a hard failure. Returns the status code."""
    headers = {'Content-Type': 'application/json'}
    if secret:
        headers['X-Webhook-Secret'] = secret

    logger.info("Forwarding outreach for deal %s to %s", payload.get('deal_id'), webhook_url)
    try:
        resp = requests.post(webhook_url, json=payload, headers=headers, timeout=WEBHOOK_TIMEOUT)
    except requests.RequestException as e:
        logger.error("Outreach webhook request failed: %s", e)
        raise UpstreamError(str(e))

    if not 200 <= resp.status_code < 300:
        logger.error("Outreach webhook returned %d: %s", resp.status_code, resp.text[:200])
        raise UpstreamError(f"Webhook returned {resp.status_code}")

    return resp.status_code
