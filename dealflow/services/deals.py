"""
Deal store adapter — CRUD against business_ideas.

Request bodies are checked against DEAL_FIELDS; anything else is rejected
before the store is touched. SQLAlchemy failures surface as StoreError.
"""
import logging
import math
from typing import Dict, List

from sqlalchemy.exc import SQLAlchemyError

from dealflow.database import get_session
from dealflow.errors import NotFoundError, StoreError, ValidationError
from dealflow.models.deal import Deal, DEAL_FIELDS

logger = logging.getLogger('services.deals')

_NUMERIC_FIELDS = {'funding_amount_requested'}
_MULTILINE_FIELDS = {'description'}
_REQUIRED_ON_CREATE = ('business_name',)
# NOT NULL columns with defaults
_DEFAULTED_FIELDS = ('stage', 'source')


def _coerce_number(field, value):
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        # Form submissions arrive as strings like "50,000" or "$50000"
        cleaned = value.replace(',', '').replace('$', '').strip()
        try:
            number = float(cleaned)
        except ValueError:
            raise ValidationError(f"{field} must be a number")
    else:
        raise ValidationError(f"{field} must be a number")

    # NaN/Infinity cannot be serialized back out as JSON
    try:
        finite = math.isfinite(number)
    except OverflowError:
        finite = False
    if not finite:
        raise ValidationError(f"{field} must be a number")
    return number


def _clean_text(field, value):
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    value = value.strip()
    if field not in _MULTILINE_FIELDS and ('\n' in value or '\r' in value):
        raise ValidationError(f"{field} must be a single line")
    return value


def clean_deal_fields(payload, partial: bool = False) -> Dict:
    """Validate a request body against the deal allow-list."""
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')

    unknown = sorted(set(payload) - set(DEAL_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(unknown)}")

    cleaned = {}
    for field, value in payload.items():
        if field in _NUMERIC_FIELDS:
            cleaned[field] = _coerce_number(field, value)
        else:
            cleaned[field] = _clean_text(field, value)

    if partial:
        if not cleaned:
            raise ValidationError('No fields to update')
        for field in _REQUIRED_ON_CREATE + _DEFAULTED_FIELDS:
            if field in cleaned and not cleaned[field]:
                raise ValidationError(f"{field} cannot be empty")
    else:
        for field in _REQUIRED_ON_CREATE:
            if not cleaned.get(field):
                raise ValidationError(f"{field} is required")
        # Blank stage/source fall back to the column defaults
        for field in _DEFAULTED_FIELDS:
            if field in cleaned and not cleaned[field]:
                del cleaned[field]

    return cleaned


def list_deals() -> List[Dict]:
    session = get_session()
    try:
        deals = session.query(Deal).order_by(Deal.created_at.desc()).all()
        return [deal.to_dict() for deal in deals]
    except SQLAlchemyError as e:
        logger.error("Failed to list deals", exc_info=True)
        raise StoreError(str(e))
    finally:
        session.close()


def get_deal(deal_id) -> Dict:
    session = get_session()
    try:
        deal = session.get(Deal, str(deal_id))
    except SQLAlchemyError as e:
        logger.error("Failed to load deal %s", deal_id, exc_info=True)
        raise StoreError(str(e))
    finally:
        session.close()

    if deal is None:
        raise NotFoundError('Deal not found')
    return deal.to_dict()


def create_deal(payload, overrides: Dict = None) -> Dict:
    """Insert a deal. overrides are applied after validation (e.g. forced source)."""
    fields = clean_deal_fields(payload)
    if overrides:
        fields.update(overrides)

    session = get_session()
    try:
        deal = Deal(**fields)
        session.add(deal)
        session.commit()
        logger.info("Created deal %s (%s)", deal.id, deal.source)
        return deal.to_dict()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Failed to create deal", exc_info=True)
        raise StoreError(str(e))
    finally:
        session.close()


def update_deal(deal_id, payload) -> Dict:
    fields = clean_deal_fields(payload, partial=True)

    session = get_session()
    try:
        deal = session.get(Deal, str(deal_id))
        if deal is None:
            raise NotFoundError('Deal not found')
        for field, value in fields.items():
            setattr(deal, field, value)
        session.commit()
        logger.info("Updated deal %s: %s", deal.id, ', '.join(sorted(fields)))
        return deal.to_dict()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Failed to update deal %s", deal_id, exc_info=True)
        raise StoreError(str(e))
    finally:
        session.close()


def delete_deal(deal_id) -> int:
    """Delete by id. Returns the number of rows removed (0 is not an error)."""
    session = get_session()
    try:
        deleted = session.query(Deal).filter(Deal.id == str(deal_id)).delete(synchronize_session=False)
        session.commit()
        logger.info("Deleted deal %s (%d rows)", deal_id, deleted)
        return deleted
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Failed to delete deal %s", deal_id, exc_info=True)
        raise StoreError(str(e))
    finally:
        session.close()
