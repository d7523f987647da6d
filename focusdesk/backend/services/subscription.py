"""
Subscription Service.

Trial and subscription rules:

    active = subscription_until > now
          or trial not started
          or now < trial_started_at + trial.days

Enforcement is switched by ``features.subscription_enforced``.
"""

from datetime import datetime, timedelta

from focusdesk.backend.core.config import get_app_config
from focusdesk.backend.core.exceptions import TrialExpiredError
from focusdesk.backend.core.logging import get_logger
from focusdesk.backend.core.utils import utc_now
from focusdesk.backend.models.user import User
from focusdesk.backend.schemas.user import SubscriptionStatus

logger = get_logger(__name__)


def trial_ends_at(user: User) -> datetime | None:
    if user.trial_started_at is None:
        return None
    days = get_app_config().security.trial.days
    return user.trial_started_at + timedelta(days=days)


def is_active(user: User, now: datetime | None = None) -> bool:
    now = now or utc_now()
    if user.subscription_until is not None and user.subscription_until > now:
        return True
    ends_at = trial_ends_at(user)
    if ends_at is None:
        return True
    return now < ends_at


def ensure_active(user: User) -> None:
    """
    Raise TrialExpiredError for users whose trial and subscription ended.

    Raises:
        TrialExpiredError: If the user is inactive and enforcement is on
    """
    if not get_app_config().features.subscription_enforced:
        return
    if not is_active(user):
        logger.info("Inactive user blocked", extra={"user_id": user.id})
        raise TrialExpiredError()


def ensure_trial_started(user: User) -> None:
    """Start the trial on first paid action. Flushed with the caller's session."""
    if user.trial_started_at is None:
        user.trial_started_at = utc_now()
        logger.info("Trial started", extra={"user_id": user.id})


def subscription_status(user: User) -> SubscriptionStatus:
    return SubscriptionStatus(
        active=is_active(user),
        trial_started_at=user.trial_started_at,
        trial_ends_at=trial_ends_at(user),
        subscription_until=user.subscription_until,
    )
