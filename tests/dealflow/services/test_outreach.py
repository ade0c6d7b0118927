"""Tests for dealflow.services.outreach — email rendering/sending and webhook forwarding."""
import smtplib
import pytest
import requests
from unittest.mock import patch, MagicMock

from dealflow.config import Settings
from dealflow.errors import ServiceUnavailableError, UpstreamError, ValidationError
from dealflow.services.outreach import (
    format_funding,
    outreach_subject,
    render_outreach_html,
    send_outreach_email,
    build_forward_payload,
    forward_outreach,
)


MAIL_SETTINGS = Settings(
    smtp_host='smtp.test',
    smtp_port=587,
    smtp_user='mailer',
    smtp_password='secret',
    smtp_from='deals@price.test',
)

DEAL = {
    'id': 'd-1',
    'business_name': 'Acme',
    'contact_name': 'Wile',
    'contact_email': 'wile@acme.test',
    'industry': 'retail',
    'funding_amount_requested': 50000,
}


class TestFormatting:

    @pytest.mark.parametrize('amount,expected', [
        (50000, '$50,000'),
        (1234567.0, '$1,234,567'),
        (None, 'N/A'),
        ('lots', 'lots'),
    ])
    def test_format_funding(self, amount, expected):
        assert format_funding(amount) == expected

    def test_subject(self):
        assert outreach_subject(DEAL) == 'Investment Opportunity: Acme'

    def test_subject_folds_line_breaks(self):
        deal = dict(DEAL, business_name='Acme\r\nBcc: evil@x.y')
        assert outreach_subject(deal) == 'Investment Opportunity: Acme Bcc: evil@x.y'

    def test_html_contains_deal_details(self, app):
        with app.app_context():
            html = render_outreach_html(DEAL, 'Price Capital')
        assert 'Dear Wile,' in html
        assert 'Industry: retail' in html
        assert 'Funding Requested: $50,000' in html
        assert 'Price Capital Team' in html

    def test_html_escapes_deal_values(self, app):
        with app.app_context():
            html = render_outreach_html(dict(DEAL, business_name='<script>x</script>'), 'Price Capital')
        assert '<script>' not in html
        assert '&lt;script&gt;' in html


class TestSendOutreachEmail:

    def test_unconfigured_raises_503(self):
        with pytest.raises(ServiceUnavailableError):
            send_outreach_email(DEAL, Settings())

    def test_partial_smtp_config_counts_as_unconfigured(self):
        with pytest.raises(ServiceUnavailableError):
            send_outreach_email(DEAL, Settings(smtp_host='smtp.test', smtp_port=587))

    def test_missing_contact_email(self):
        with pytest.raises(ValidationError):
            send_outreach_email(dict(DEAL, contact_email=None), MAIL_SETTINGS)

    def test_multiline_business_name_still_sends(self, app):
        server = MagicMock()
        deal = dict(DEAL, business_name='Acme\nBcc: evil@x.y')
        with patch('dealflow.services.outreach.smtplib.SMTP') as smtp_cls:
            smtp_cls.return_value.__enter__.return_value = server
            with app.app_context():
                send_outreach_email(deal, MAIL_SETTINGS)
        msg = server.send_message.call_args[0][0]
        assert msg['Subject'] == 'Investment Opportunity: Acme Bcc: evil@x.y'
        assert msg['Bcc'] is None

    def test_multiline_recipient_is_validation_error(self, app):
        with patch('dealflow.services.outreach.smtplib.SMTP') as smtp_cls:
            with app.app_context():
                with pytest.raises(ValidationError):
                    send_outreach_email(dict(DEAL, contact_email='a@x.com\nBcc: b@y.z'), MAIL_SETTINGS)
        smtp_cls.assert_not_called()

    def test_sends_via_starttls(self, app):
        server = MagicMock()
        with patch('dealflow.services.outreach.smtplib.SMTP') as smtp_cls:
            smtp_cls.return_value.__enter__.return_value = server
            with app.app_context():
                recipient = send_outreach_email(DEAL, MAIL_SETTINGS)

        assert recipient == 'wile@acme.test'
        smtp_cls.assert_called_once_with('smtp.test', 587, timeout=30)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with('mailer', 'secret')
        msg = server.send_message.call_args[0][0]
        assert msg['From'] == 'deals@price.test'

    def test_connection_error_is_upstream(self, app):
        with patch('dealflow.services.outreach.smtplib.SMTP', side_effect=ConnectionRefusedError('refused')):
            with app.app_context():
                with pytest.raises(UpstreamError, match='refused'):
                    send_outreach_email(DEAL, MAIL_SETTINGS)

    def test_auth_error_is_upstream(self, app):
        server = MagicMock()
        server.login.side_effect = smtplib.SMTPAuthenticationError(535, b'bad credentials')
        with patch('dealflow.services.outreach.smtplib.SMTP') as smtp_cls:
            smtp_cls.return_value.__enter__.return_value = server
            with app.app_context():
                with pytest.raises(UpstreamError):
                    send_outreach_email(DEAL, MAIL_SETTINGS)
        server.send_message.assert_not_called()


class TestForwardOutreach:

    def test_payload_shape(self):
        payload = build_forward_payload(DEAL, 'alice@example.com')
        assert payload['deal_id'] == 'd-1'
        assert payload['contact_email'] == 'wile@acme.test'
        assert payload['triggered_by'] == 'alice@example.com'
        assert payload['triggered_at']

    def test_no_secret_header_when_unset(self):
        with patch('dealflow.services.outreach.requests.post', return_value=MagicMock(status_code=204)) as mock_post:
            assert forward_outreach('https://hook.test', {'deal_id': 'd-1'}) == 204
        assert 'X-Webhook-Secret' not in mock_post.call_args[1]['headers']
        assert mock_post.call_args[1]['timeout'] == 10

    def test_non_2xx_raises(self):
        with patch('dealflow.services.outreach.requests.post', return_value=MagicMock(status_code=404, text='')):
            with pytest.raises(UpstreamError, match='Webhook returned 404'):
                forward_outreach('https://hook.test', {})

    def test_network_error_raises(self):
        with patch('dealflow.services.outreach.requests.post', side_effect=requests.Timeout('timed out')):
            with pytest.raises(UpstreamError, match='timed out'):
                forward_outreach('https://hook.test', {})
