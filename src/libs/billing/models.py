"""
Data models for plan tiers, subscriptions and usage quotas.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

UNLIMITED = 'unlimited'


class PlanTier(Enum):
    """Plan tier derived from the subscription."""
    FREEMIUM = "freemium"
    PRO = "pro"


class UsageAction(Enum):
    """Actions that consume quota."""
    JOB_SEARCH = "job-search"
    CV_CREATION = "cv-creation"
    CV_OPTIMIZATION = "cv-optimization"


class BillingError(Exception):
    """Raised when the billing ledger cannot do its job."""
    pass


@dataclass
class Subscription:
    """Subscription row of a user."""
    user_id: str
    status: str = "inactive"
    plan_tier: PlanTier = PlanTier.FREEMIUM
    plan_id: Optional[str] = None
    plan_name: Optional[str] = None
    amount: Optional[str] = None
    paid_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    payment_method: Optional[str] = None

    def is_active(self, now: datetime) -> bool:
        """An active subscription has not expired yet."""
        if self.status != "active" or self.expires_at is None:
            return False
        return self.expires_at > now

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['plan_tier'] = self.plan_tier.value
        data['paid_at'] = self.paid_at.isoformat() if self.paid_at else None
        data['expires_at'] = self.expires_at.isoformat() if self.expires_at else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Subscription':
        paid_at = data.get('paid_at')
        expires_at = data.get('expires_at')
        return cls(
            user_id=data['user_id'],
            status=data.get('status', 'inactive'),
            plan_tier=PlanTier(data.get('plan_tier', PlanTier.FREEMIUM.value)),
            plan_id=data.get('plan_id'),
            plan_name=data.get('plan_name'),
            amount=data.get('amount'),
            paid_at=datetime.fromisoformat(paid_at) if isinstance(paid_at, str) else paid_at,
            expires_at=datetime.fromisoformat(expires_at) if isinstance(expires_at, str) else expires_at,
            payment_method=data.get('payment_method'),
        )


@dataclass
class Usage:
    """Consumed quotas and purchased tokens of a user."""
    user_id: str
    freemium_job_searches: int = 0
    pro_job_searches: int = 0
    freemium_cv_creations: int = 0
    freemium_cv_optimizations: int = 0
    purchased_job_search_tokens: int = 0
    purchased_optimization_tokens: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Usage':
        return cls(
            user_id=data['user_id'],
            freemium_job_searches=data.get('freemium_job_searches') or 0,
            pro_job_searches=data.get('pro_job_searches') or 0,
            freemium_cv_creations=data.get('freemium_cv_creations') or 0,
            freemium_cv_optimizations=data.get('freemium_cv_optimizations') or 0,
            purchased_job_search_tokens=data.get('purchased_job_search_tokens') or 0,
            purchased_optimization_tokens=data.get('purchased_optimization_tokens') or 0,
        )


@dataclass
class Remaining:
    """What a user can still do."""
    job_searches: int
    included_job_searches: int
    token_job_searches: int
    cv_creations: Union[int, str]
    cv_optimizations: Union[int, str]


@dataclass
class BillingStatus:
    """Snapshot of a user's plan, subscription and quotas."""
    plan_tier: PlanTier
    subscription_active: bool
    subscription: Optional[Subscription]
    usage: Usage
    remaining: Remaining

    def to_dict(self) -> Dict[str, Any]:
        subscription = self.subscription
        return {
            'plan_tier': self.plan_tier.value,
            'subscription': {
                'status': 'active' if self.subscription_active else 'inactive',
                'plan_id': subscription.plan_id if subscription else None,
                'plan_name': subscription.plan_name if subscription else None,
                'amount': subscription.amount if subscription else None,
                'paid_at': subscription.paid_at.isoformat() if subscription and subscription.paid_at else None,
                'expires_at': subscription.expires_at.isoformat() if subscription and subscription.expires_at else None,
                'payment_method': subscription.payment_method if subscription else None,
            },
            'usage': self.usage.to_dict(),
            'remaining': asdict(self.remaining),
        }


@dataclass
class ConsumeResult:
    """Outcome of a quota consumption attempt."""
    allowed: bool
    message: str
    status: BillingStatus = field(repr=False)
