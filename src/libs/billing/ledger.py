"""
Plan tiers, consumable quotas and purchased token packs.
"""

import dataclasses
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Union

import config as cfg
from src.logging import logger
from src.utils.validator import validate_choice

from .models import (
    UNLIMITED,
    BillingError,
    BillingStatus,
    ConsumeResult,
    PlanTier,
    Remaining,
    Subscription,
    Usage,
    UsageAction,
)
from .repository import BillingRepository


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BillingLedger:
    """
    Tracks what each user is allowed to do.

    Freemium users get one job search, one CV creation and one CV
    optimization. Pro users get ten job searches per subscription and
    unlimited CVs and optimizations. Purchased job-search tokens are spent
    once the included searches are used up. A single writer per user is
    assumed; nothing here guards against concurrent updates.
    """

    def __init__(self, repository: BillingRepository, clock: Callable[[], datetime] = None):
        """
        Initialize the ledger.

        Args:
            repository: Storage for subscription and usage rows
            clock: Returns the current time, timezone aware
        """
        if repository is None:
            raise BillingError("Billing repository is not configured")
        self.repository = repository
        self.clock = clock or _utcnow

    @staticmethod
    def job_search_quota(plan_tier: PlanTier) -> int:
        return cfg.PRO_JOB_SEARCHES if plan_tier == PlanTier.PRO else cfg.FREEMIUM_JOB_SEARCHES

    def _plan_tier(self, subscription: Optional[Subscription]) -> PlanTier:
        if subscription and subscription.is_active(self.clock()) and subscription.plan_tier == PlanTier.PRO:
            return PlanTier.PRO
        return PlanTier.FREEMIUM

    def ensure_usage(self, user_id: str) -> Usage:
        """Get the usage row of a user, creating an empty one if missing."""
        usage = self.repository.get_usage(user_id)
        if usage is not None:
            return usage
        usage = Usage(user_id=user_id)
        self.repository.upsert_usage(usage)
        logger.debug(f"Created usage row for {user_id}")
        return usage

    def get_billing_status(self, user_id: str) -> BillingStatus:
        """Compute plan tier and remaining quotas of a user."""
        subscription = self.repository.get_subscription(user_id)
        usage = self.ensure_usage(user_id)
        plan_tier = self._plan_tier(subscription)
        is_pro = plan_tier == PlanTier.PRO

        consumed_searches = usage.pro_job_searches if is_pro else usage.freemium_job_searches
        included = max(0, self.job_search_quota(plan_tier) - consumed_searches)
        tokens = max(0, usage.purchased_job_search_tokens)

        cv_remaining: Union[int, str] = (
            UNLIMITED if is_pro else max(0, cfg.FREEMIUM_CV_CREATIONS - usage.freemium_cv_creations)
        )
        optimization_remaining: Union[int, str] = (
            UNLIMITED if is_pro else max(0, cfg.FREEMIUM_CV_OPTIMIZATIONS - usage.freemium_cv_optimizations)
        )

        logger.debug(f"Billing status for {user_id}: tier={plan_tier.value}, "
                     f"searches={included}+{tokens}, cv={cv_remaining}, optimizations={optimization_remaining}")

        return BillingStatus(
            plan_tier=plan_tier,
            subscription_active=bool(subscription and subscription.is_active(self.clock())),
            subscription=subscription,
            usage=usage,
            remaining=Remaining(
                job_searches=included + tokens,
                included_job_searches=included,
                token_job_searches=tokens,
                cv_creations=cv_remaining,
                cv_optimizations=optimization_remaining,
            ),
        )

    def mark_checkout_success(self, user_id: str, plan_id: str) -> Subscription:
        """Activate a Pro subscription after a successful checkout."""
        validate_choice(plan_id, cfg.PLANS.keys(), name="plan")
        self.ensure_usage(user_id)

        plan = cfg.PLANS[plan_id]
        paid_at = self.clock()
        subscription = Subscription(
            user_id=user_id,
            status="active",
            plan_tier=PlanTier.PRO,
            plan_id=plan_id,
            plan_name=plan["plan_name"],
            amount=plan["amount"],
            paid_at=paid_at,
            expires_at=paid_at + timedelta(days=plan["duration_days"]),
            payment_method=cfg.CHECKOUT_PAYMENT_METHOD,
        )
        self.repository.upsert_subscription(subscription)
        logger.info(f"Activated {plan['plan_name']} for {user_id} until {subscription.expires_at.isoformat()}")
        return subscription

    def add_job_search_tokens(self, user_id: str, token_pack_id: str) -> int:
        """Credit a purchased token pack. Returns the new token balance."""
        validate_choice(token_pack_id, cfg.TOKEN_PACKS.keys(), name="token pack")
        usage = self.ensure_usage(user_id)
        balance = usage.purchased_job_search_tokens + cfg.TOKEN_PACKS[token_pack_id]
        self.repository.upsert_usage(dataclasses.replace(usage, purchased_job_search_tokens=balance))
        logger.info(f"Added {cfg.TOKEN_PACKS[token_pack_id]} job search tokens for {user_id}")
        return balance

    def _update_usage(self, usage: Usage, **changes) -> None:
        self.repository.upsert_usage(dataclasses.replace(usage, **changes))

    def consume_usage(self, user_id: str, action: str) -> ConsumeResult:
        """
        Spend one unit of quota for an action.

        Args:
            user_id: User performing the action
            action: ``job-search``, ``cv-creation`` or ``cv-optimization``

        Returns:
            Whether the action is allowed, a message and the updated status
        """
        validate_choice(action, [a.value for a in UsageAction], name="usage action")
        action = UsageAction(action)
        status = self.get_billing_status(user_id)
        usage = status.usage
        is_pro = status.plan_tier == PlanTier.PRO

        if action == UsageAction.JOB_SEARCH:
            if status.remaining.included_job_searches > 0:
                if is_pro:
                    self._update_usage(usage, pro_job_searches=usage.pro_job_searches + 1)
                else:
                    self._update_usage(usage, freemium_job_searches=usage.freemium_job_searches + 1)
                logger.info(f"Job search quota consumed for {user_id}")
                return ConsumeResult(True, "Job search quota consumed.", self.get_billing_status(user_id))

            if status.remaining.token_job_searches > 0:
                self._update_usage(usage, purchased_job_search_tokens=usage.purchased_job_search_tokens - 1)
                logger.info(f"Purchased job search token consumed for {user_id}")
                return ConsumeResult(True, "1 purchased job-search token consumed.", self.get_billing_status(user_id))

            message = (
                f"You reached your Pro quota ({cfg.PRO_JOB_SEARCHES} searches). Buy token packs to continue."
                if is_pro else
                "Freemium allows only 1 job search. Upgrade or buy token packs to continue."
            )
            logger.info(f"Job search blocked for {user_id}")
            return ConsumeResult(False, message, status)

        if action == UsageAction.CV_CREATION:
            if is_pro:
                return ConsumeResult(True, "Pro plan has unlimited CV creations.", status)
            if status.remaining.cv_creations == 0:
                logger.info(f"CV creation blocked for {user_id}")
                return ConsumeResult(False, "Freemium allows only 1 CV creation.", status)
            self._update_usage(usage, freemium_cv_creations=usage.freemium_cv_creations + 1)
            logger.info(f"CV creation quota consumed for {user_id}")
            return ConsumeResult(True, "CV creation quota consumed.", self.get_billing_status(user_id))

        if is_pro:
            return ConsumeResult(True, "Pro plan has unlimited CV optimizations.", status)
        if status.remaining.cv_optimizations == 0:
            logger.info(f"CV optimization blocked for {user_id}")
            return ConsumeResult(
                False,
                "Freemium allows only 1 CV optimization. Upgrade to Pro for unlimited optimizations.",
                status,
            )
        self._update_usage(usage, freemium_cv_optimizations=usage.freemium_cv_optimizations + 1)
        logger.info(f"CV optimization quota consumed for {user_id}")
        return ConsumeResult(True, "CV optimization quota consumed.", self.get_billing_status(user_id))
