"""
Balance Tracker

Cached per-asset balances for one account:
- resync: exact sum of the asset's objects after a full load
- apply_commit_delta: additive adjustment after a submitted transaction
- only the held asset's balance is persisted, as a decimal string under "balance"

Balances are never negative; computed negatives are floored to zero.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Optional

from loguru import logger

from .errors import InternalWalletError
from .models import AssetKind, SpendableObject


BALANCE_KEY = 'balance'


class JsonFileStorage:
    """
    Key-value storage collaborator backed by a JSON file

    Values are kept under a namespace (one per held asset) so several
    accounts can share a file.
    """

    def __init__(self, path: str, namespace: str):
        """
        Initialize storage

        Args:
            path: JSON file path
            namespace: Key prefix for this account, e.g. the crypto id
        """
        self.path = Path(path)
        self.namespace = namespace
        self._data: Dict[str, Dict[str, str]] = self._load()

    def _load(self) -> Dict[str, Dict[str, str]]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load storage {self.path}: {e}")
            return {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(self.namespace, {}).get(key)

    def set(self, key: str, value: str):
        self._data.setdefault(self.namespace, {})[key] = value

    def save(self):
        tmp_path = self.path.with_name(self.path.name + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(self._data, f, indent=2, sort_keys=True)
        tmp_path.replace(self.path)
        logger.debug(f"Storage saved: {self.path}")


class TrackerState(Enum):
    UNINITIALIZED = 'uninitialized'
    RESYNCED = 'resynced'
    ADJUSTED = 'adjusted'


class BalanceTracker:
    """
    Cached balance per asset

    State transitions: UNINITIALIZED -> RESYNCED (load) -> ADJUSTED (commit,
    repeatable). A fresh resync returns to RESYNCED.
    """

    def __init__(self, storage, held_asset: AssetKind):
        """
        Initialize tracker

        Args:
            storage: Key-value collaborator with get/set/save
            held_asset: Asset whose balance is persisted
        """
        self.storage = storage
        self.held_asset = held_asset
        self.state = TrackerState.UNINITIALIZED
        self._balances: Dict[AssetKind, int] = {}

    def seed_from_storage(self) -> int:
        """
        Seed the held asset's balance from storage

        Returns:
            Seeded balance (0 when nothing was stored)
        """
        stored = self.storage.get(BALANCE_KEY)
        try:
            balance = max(int(stored or 0), 0)
        except ValueError:
            logger.warning(f"Ignoring malformed stored balance: {stored!r}")
            balance = 0
        self._balances[self.held_asset] = balance
        return balance

    def balance(self, asset: Optional[AssetKind] = None) -> int:
        return self._balances.get(asset or self.held_asset, 0)

    def resync(self, asset: AssetKind, objects: Iterable[SpendableObject]) -> int:
        """
        Replace an asset's balance with the sum of its objects

        Args:
            asset: Asset the objects belong to
            objects: Every object owned for that asset

        Returns:
            New balance
        """
        balance = sum(obj.balance for obj in objects)
        self._balances[asset] = balance
        self.state = TrackerState.RESYNCED
        logger.info(f"✓ Balance resynced for {asset!r}: {balance}")

        if asset == self.held_asset:
            self._persist()
        return balance

    def apply_commit_delta(self, asset: AssetKind, signed_delta: int) -> int:
        """
        Adjust an asset's balance after a committed transaction

        Args:
            asset: Asset whose balance changed
            signed_delta: Change in base units (negative for spending)

        Returns:
            New balance, floored at zero
        """
        if self.state is TrackerState.UNINITIALIZED:
            raise InternalWalletError("Balance adjusted before the first resync")

        balance = self._balances.get(asset, 0) + signed_delta
        if balance < 0:
            logger.warning(f"Balance for {asset!r} computed negative ({balance}), clamping to 0")
            balance = 0

        self._balances[asset] = balance
        self.state = TrackerState.ADJUSTED
        logger.debug(f"Balance for {asset!r} adjusted by {signed_delta}: {balance}")

        if asset == self.held_asset:
            self._persist()
        return balance

    def _persist(self):
        self.storage.set(BALANCE_KEY, str(self._balances.get(self.held_asset, 0)))
        self.storage.save()
