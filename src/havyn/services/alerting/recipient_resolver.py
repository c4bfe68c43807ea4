"""
Recipient Resolver

Decides who receives a crisis alert: the user's guardian, or the
default helpline when no guardian is configured, plus any helpline
override on the account.

SAFETY-CRITICAL: The triggering user's own address is never a
recipient.
"""

from typing import Optional

from havyn.config import get_settings
from havyn.config.logging_config import get_logger
from havyn.domain.models.alert import RecipientSet
from havyn.domain.models.user_account import UserAccount
from havyn.infrastructure.database.user_store import UserAccountStore

logger = get_logger(__name__)


def build_recipients(user: UserAccount, default_helpline: str) -> RecipientSet:
    """
    Build the recipient set for a user snapshot.

    Args:
        user: Account snapshot
        default_helpline: Stand-in for a missing guardian

    Returns:
        Ordered, de-duplicated RecipientSet
    """
    no_guardian = not user.has_guardian
    primary = default_helpline if no_guardian else user.guardian_email

    return RecipientSet.build(
        (primary, user.helpline_email),
        exclude=user.email,
        no_guardian_configured=no_guardian,
    )


class RecipientResolver:
    """
    Store-backed recipient resolution.

    Usage:
        resolver = RecipientResolver(store)
        recipients = await resolver.resolve(user_id)
    """

    def __init__(
        self,
        store: UserAccountStore,
        default_helpline: Optional[str] = None,
    ) -> None:
        self._store = store
        self._default_helpline = (
            default_helpline or get_settings().alert.default_helpline_email
        )

    @property
    def default_helpline(self) -> str:
        return self._default_helpline

    def build(self, user: UserAccount) -> RecipientSet:
        return build_recipients(user, self._default_helpline)

    async def resolve(self, user_id: str) -> RecipientSet:
        """
        Resolve recipients for a user id.

        Returns:
            RecipientSet; empty when the user is missing or the store
            fails. Never raises.
        """
        try:
            user = await self._store.get_user(user_id)
        except Exception as e:
            logger.error(
                "Recipient lookup failed",
                user_id=user_id,
                error=str(e),
            )
            return RecipientSet.empty()

        if user is None:
            logger.error("Recipient lookup found no user", user_id=user_id)
            return RecipientSet.empty()

        recipients = self.build(user)
        if recipients.no_guardian_configured:
            logger.warning("No guardian configured, routing to helpline", user_id=user_id)
        return recipients
