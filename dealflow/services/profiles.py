"""
User profiles — lookup, admin listing, and the fetch-or-create bootstrapper.
"""
import enum
import logging
from typing import Dict, List, NamedTuple, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from dealflow.database import get_session
from dealflow.errors import StoreError
from dealflow.models.user_profile import UserProfile, DEFAULT_ROLE

logger = logging.getLogger('services.profiles')


class ProfileOutcome(str, enum.Enum):
    PERSISTED = 'persisted'
    EPHEMERAL_DEFAULT = 'ephemeral_default'


class ProfileResult(NamedTuple):
    profile: Dict
    outcome: ProfileOutcome

    @property
    def persisted(self) -> bool:
        return self.outcome is ProfileOutcome.PERSISTED


def username_from_email(email: Optional[str]) -> str:
    if not email:
        return ''
    return email.split('@', 1)[0]


def get_profile(user_id) -> Optional[UserProfile]:
    session = get_session()
    try:
        return session.get(UserProfile, str(user_id))
    except SQLAlchemyError as e:
        logger.error("Failed to load profile %s", user_id, exc_info=True)
        raise StoreError(str(e))
    finally:
        session.close()


def list_profiles() -> List[Dict]:
    session = get_session()
    try:
        profiles = session.query(UserProfile).order_by(UserProfile.username).all()
        return [profile.to_dict() for profile in profiles]
    except SQLAlchemyError as e:
        logger.error("Failed to list profiles", exc_info=True)
        raise StoreError(str(e))
    finally:
        session.close()


def default_profile(user) -> UserProfile:
    metadata = user.metadata or {}
    return UserProfile(
        id=user.id,
        username=username_from_email(user.email),
        email=user.email,
        full_name=metadata.get('full_name') or metadata.get('name'),
        role=DEFAULT_ROLE,
    )


def fetch_or_create_profile(user) -> ProfileResult:
    """
    Return the caller's profile, creating a default one on first fetch.

    Never raises for store failures: a failed read falls through to creation,
    a conflicting insert returns the row that won, and any other failed insert
    returns the unsaved default tagged EPHEMERAL_DEFAULT.
    """
    try:
        existing = get_profile(user.id)
    except StoreError:
        existing = None

    if existing is not None:
        return ProfileResult(existing.to_dict(), ProfileOutcome.PERSISTED)

    profile = default_profile(user)
    session = get_session()
    try:
        session.add(profile)
        session.commit()
        logger.info("Created profile for %s (%s)", user.id, profile.username)
        return ProfileResult(profile.to_dict(), ProfileOutcome.PERSISTED)
    except IntegrityError:
        session.rollback()
        # Lost a race with a concurrent first fetch; the winner's row is authoritative
        try:
            winner = get_profile(user.id)
        except StoreError:
            winner = None
        if winner is not None:
            return ProfileResult(winner.to_dict(), ProfileOutcome.PERSISTED)
        logger.error("Profile insert for %s conflicted but no row was found", user.id, exc_info=True)
        fallback = default_profile(user)
        return ProfileResult(fallback.to_dict(), ProfileOutcome.EPHEMERAL_DEFAULT)
    except SQLAlchemyError:
        session.rollback()
        logger.error("Failed to persist default profile for %s", user.id, exc_info=True)
        fallback = default_profile(user)
        return ProfileResult(fallback.to_dict(), ProfileOutcome.EPHEMERAL_DEFAULT)
    finally:
        session.close()
