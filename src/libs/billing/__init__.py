"""
Billing Module

Plan tiers, consumable usage quotas and purchased token packs for CV builder
accounts, over a pluggable repository.
"""

from .ledger import BillingLedger
from .models import (
    UNLIMITED,
    BillingError,
    BillingStatus,
    ConsumeResult,
    PlanTier,
    Subscription,
    Usage,
    UsageAction,
)
from .repository import BillingRepository, InMemoryBillingRepository, YamlBillingRepository

__all__ = [
    "UNLIMITED",
    "BillingError",
    "BillingLedger",
    "BillingRepository",
    "BillingStatus",
    "ConsumeResult",
    "InMemoryBillingRepository",
    "PlanTier",
    "Subscription",
    "Usage",
    "UsageAction",
    "YamlBillingRepository",
]
