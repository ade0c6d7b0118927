"""
UserProfile model — 1:1 with an identity-provider user.
"""
from sqlalchemy import Column, Text, DateTime

from dealflow.database import Base
from dealflow.models.deal import _utcnow, _iso


ADMIN_ROLE = 'admin'
DEFAULT_ROLE = 'user'


class UserProfile(Base):
    __tablename__ = 'user_profiles'

    id = Column(Text, primary_key=True)  # identity provider user id
    username = Column(Text, nullable=False, index=True)
    email = Column(Text, nullable=True)
    full_name = Column(Text, nullable=True)
    role = Column(Text, nullable=False, default=DEFAULT_ROLE)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    @property
    def is_admin(self):
        return self.role == ADMIN_ROLE

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'full_name': self.full_name,
            'role': self.role,
            'created_at': _iso(self.created_at),
        }
