"""
Webhook log writer + reader.

Writes happen after the primary action. By default a failed write is logged
and swallowed, so a sent email or created deal is never reported as failed;
strict=True propagates the failure for callers whose only action is the log.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from dealflow.database import get_session
from dealflow.errors import StoreError
from dealflow.models.webhook_log import WebhookLog

logger = logging.getLogger('services.webhook_log')

RECENT_LOG_LIMIT = 50


def record_webhook(
    action: str,
    triggered_by: str,
    deal_id: Optional[str] = None,
    status: str = 'success',
    details: Dict = None,
    strict: bool = False,
) -> Optional[Dict]:
    """Append one log row. Returns it as a dict, or None if a lenient write failed."""
    session = get_session()
    try:
        entry = WebhookLog(
            business_idea_id=deal_id,
            action=action,
            triggered_by=triggered_by or 'unknown',
            status=status,
            details=details or {},
        )
        session.add(entry)
        session.commit()
        logger.info("Logged %s for deal %s by %s", action, deal_id or '-', entry.triggered_by)
        return entry.to_dict()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Failed to write webhook log %s for deal %s", action, deal_id, exc_info=True)
        if strict:
            raise StoreError(str(e))
        return None
    finally:
        session.close()


def list_recent_logs(limit: int = RECENT_LOG_LIMIT) -> List[Dict]:
    """Newest log rows first, each with its deal embedded under business_ideas."""
    limit = max(0, min(limit, RECENT_LOG_LIMIT))
    session = get_session()
    try:
        rows = (
            session.query(WebhookLog)
            .order_by(WebhookLog.triggered_at.desc())
            .limit(limit)
            .all()
        )
        return [row.to_dict(include_deal=True) for row in rows]
    except SQLAlchemyError as e:
        logger.error("Failed to list webhook logs", exc_info=True)
        raise StoreError(str(e))
    finally:
        session.close()
