"""
Deal model — one row per business funding lead (table business_ideas).
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Float, Text, DateTime

from dealflow.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


# Columns a client may set on create/update
DEAL_FIELDS = (
    'business_name',
    'contact_name',
    'contact_email',
    'industry',
    'funding_amount_requested',
    'description',
    'website_url',
    'stage',
    'source',
)


class Deal(Base):
    __tablename__ = 'business_ideas'

    id = Column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))
    business_name = Column(Text, nullable=False)
    contact_name = Column(Text, nullable=True)
    contact_email = Column(Text, nullable=True)
    industry = Column(Text, nullable=True)
    funding_amount_requested = Column(Float, nullable=True)
    description = Column(Text, nullable=True)
    website_url = Column(Text, nullable=True)
    stage = Column(Text, nullable=False, default='submitted')  # free text, e.g. submitted / reviewing
    source = Column(Text, nullable=False, default='manual')    # free text, e.g. google_form
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        data = {field: getattr(self, field) for field in DEAL_FIELDS}
        data['id'] = self.id
        data['created_at'] = _iso(self.created_at)
        data['updated_at'] = _iso(self.updated_at)
        return data
