"""
WebhookLog model — append-only audit row per triggered action.
"""
import uuid

from sqlalchemy import Column, Text, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship

from dealflow.database import Base
from dealflow.models.deal import _utcnow, _iso


ACTION_SEND_OUTREACH = 'send_outreach'
ACTION_FORM_SUBMISSION = 'form_submission'
ACTION_OUTREACH_EXTERNAL = 'outreach_external'
ACTION_TRIGGER_OUTREACH = 'trigger_outreach'


class WebhookLog(Base):
    __tablename__ = 'webhook_logs'

    id = Column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))
    business_idea_id = Column(
        Text, ForeignKey('business_ideas.id', ondelete='SET NULL'), nullable=True, index=True,
    )
    action = Column(Text, nullable=False)
    triggered_by = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default='success')
    triggered_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    details = Column(JSON, nullable=True)

    deal = relationship('Deal', lazy='joined')

    def to_dict(self, include_deal=False):
        data = {
            'id': self.id,
            'business_idea_id': self.business_idea_id,
            'action': self.action,
            'triggered_by': self.triggered_by,
            'status': self.status,
            'triggered_at': _iso(self.triggered_at),
            'details': self.details or {},
        }
        if include_deal:
            data['business_ideas'] = self.deal.to_dict() if self.deal else None
        return data
