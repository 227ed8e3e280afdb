"""
Persistence of subscription and usage rows.
"""

from pathlib import Path
from typing import Dict, Optional

import yaml

from src.logging import logger

from .models import Subscription, Usage


class BillingRepository:
    """Interface for subscription and usage persistence."""

    def get_subscription(self, user_id: str) -> Optional[Subscription]:
        raise NotImplementedError

    def upsert_subscription(self, subscription: Subscription) -> None:
        raise NotImplementedError

    def get_usage(self, user_id: str) -> Optional[Usage]:
        raise NotImplementedError

    def upsert_usage(self, usage: Usage) -> None:
        raise NotImplementedError


class InMemoryBillingRepository(BillingRepository):
    """Keeps rows in dictionaries keyed by user id."""

    def __init__(self):
        self.subscriptions: Dict[str, Subscription] = {}
        self.usage: Dict[str, Usage] = {}

    def get_subscription(self, user_id: str) -> Optional[Subscription]:
        return self.subscriptions.get(user_id)

    def upsert_subscription(self, subscription: Subscription) -> None:
        self.subscriptions[subscription.user_id] = subscription

    def get_usage(self, user_id: str) -> Optional[Usage]:
        return self.usage.get(user_id)

    def upsert_usage(self, usage: Usage) -> None:
        self.usage[usage.user_id] = usage


class YamlBillingRepository(BillingRepository):
    """Stores all rows in a single YAML file."""

    def __init__(self, file_path: Path = None):
        self.file_path = Path(file_path or Path("data_folder") / "billing.yaml")
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> Dict[str, Dict]:
        if not self.file_path.exists():
            return {'subscriptions': {}, 'usage': {}}
        with open(self.file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        data.setdefault('subscriptions', {})
        data.setdefault('usage', {})
        return data

    def _save(self, data: Dict[str, Dict]) -> None:
        with open(self.file_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        logger.debug(f"Saved billing data to {self.file_path}")

    def get_subscription(self, user_id: str) -> Optional[Subscription]:
        row = self._load()['subscriptions'].get(user_id)
        return Subscription.from_dict(row) if row else None

    def upsert_subscription(self, subscription: Subscription) -> None:
        data = self._load()
        data['subscriptions'][subscription.user_id] = subscription.to_dict()
        self._save(data)

    def get_usage(self, user_id: str) -> Optional[Usage]:
        row = self._load()['usage'].get(user_id)
        return Usage.from_dict(row) if row else None

    def upsert_usage(self, usage: Usage) -> None:
        data = self._load()
        data['usage'][usage.user_id] = usage.to_dict()
        self._save(data)
