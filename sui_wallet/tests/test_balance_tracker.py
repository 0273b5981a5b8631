"""Balance tracker and JSON storage tests."""

import json
import os
import tempfile
import unittest

from sui_wallet.balance_tracker import BALANCE_KEY, BalanceTracker, JsonFileStorage, TrackerState
from sui_wallet.errors import InternalWalletError
from sui_wallet.models import AssetKind, SpendableObject

from .fixtures import COINS, TOKENS, USDC, FakeStorage


NATIVE = AssetKind.native()
TOKEN = AssetKind.token(USDC)


def objects(raw):
    return [SpendableObject.from_node(item) for item in raw]


class BalanceTrackerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.storage = FakeStorage()
        self.tracker = BalanceTracker(self.storage, NATIVE)

    def test_resync_sums_and_persists(self) -> None:
        balance = self.tracker.resync(NATIVE, objects(COINS))

        self.assertEqual(balance, 4_936_421_995)
        self.assertEqual(self.storage.data[BALANCE_KEY], '4936421995')
        self.assertEqual(self.storage.saves, 1)
        self.assertIs(self.tracker.state, TrackerState.RESYNCED)

    def test_commit_delta_adjusts(self) -> None:
        self.tracker.resync(NATIVE, objects(COINS))

        balance = self.tracker.apply_commit_delta(NATIVE, -1_002_997_880)

        self.assertEqual(balance, 3_933_424_115)
        self.assertEqual(self.storage.data[BALANCE_KEY], '3933424115')
        self.assertIs(self.tracker.state, TrackerState.ADJUSTED)

    def test_negative_result_clamps_to_zero(self) -> None:
        self.tracker.resync(NATIVE, objects(COINS[:1]))

        self.assertEqual(self.tracker.apply_commit_delta(NATIVE, -2_000_000_000), 0)
        self.assertEqual(self.tracker.balance(), 0)
        self.assertEqual(self.storage.data[BALANCE_KEY], '0')

    def test_resync_after_adjust(self) -> None:
        self.tracker.resync(NATIVE, objects(COINS))
        self.tracker.apply_commit_delta(NATIVE, -5)
        self.tracker.resync(NATIVE, objects(COINS[:1]))

        self.assertIs(self.tracker.state, TrackerState.RESYNCED)
        self.assertEqual(self.tracker.balance(NATIVE), 1_500_000_000)

    def test_adjust_before_resync_is_rejected(self) -> None:
        with self.assertRaises(InternalWalletError):
            self.tracker.apply_commit_delta(NATIVE, -1)

    def test_seed_from_storage(self) -> None:
        tracker = BalanceTracker(FakeStorage({BALANCE_KEY: '1234'}), NATIVE)
        self.assertEqual(tracker.seed_from_storage(), 1234)
        self.assertEqual(tracker.balance(), 1234)
        self.assertIs(tracker.state, TrackerState.UNINITIALIZED)

        broken = BalanceTracker(FakeStorage({BALANCE_KEY: 'not-a-number'}), NATIVE)
        self.assertEqual(broken.seed_from_storage(), 0)

    def test_only_held_asset_is_persisted(self) -> None:
        storage = FakeStorage()
        tracker = BalanceTracker(storage, TOKEN)

        tracker.resync(NATIVE, objects(COINS))
        self.assertNotIn(BALANCE_KEY, storage.data)

        tracker.resync(TOKEN, objects(TOKENS))
        self.assertEqual(storage.data[BALANCE_KEY], '700000000')

        tracker.apply_commit_delta(NATIVE, -1_997_880)
        self.assertEqual(storage.data[BALANCE_KEY], '700000000')
        self.assertEqual(tracker.balance(NATIVE), 4_934_424_115)

        tracker.apply_commit_delta(TOKEN, -100_000_000)
        self.assertEqual(storage.data[BALANCE_KEY], '600000000')
        self.assertEqual(tracker.balance(), 600_000_000)


class JsonFileStorageTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, 'storage.json')

    def tearDown(self) -> None:
        self.tmpdir.cleanup()

    def test_namespaces_share_a_file(self) -> None:
        sui = JsonFileStorage(self.path, 'sui@sui')
        sui.set(BALANCE_KEY, '10')
        sui.save()

        usdc = JsonFileStorage(self.path, 'usd-coin@sui')
        self.assertIsNone(usdc.get(BALANCE_KEY))
        usdc.set(BALANCE_KEY, '20')
        usdc.save()

        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        self.assertEqual(data, {'sui@sui': {'balance': '10'}, 'usd-coin@sui': {'balance': '20'}})
        self.assertEqual(JsonFileStorage(self.path, 'sui@sui').get(BALANCE_KEY), '10')

    def test_save_replaces_file_without_leftovers(self) -> None:
        storage = JsonFileStorage(self.path, 'sui@sui')
        storage.set(BALANCE_KEY, '10')
        storage.save()
        storage.set(BALANCE_KEY, '11')
        storage.save()

        self.assertEqual(os.listdir(self.tmpdir.name), ['storage.json'])
        self.assertEqual(JsonFileStorage(self.path, 'sui@sui').get(BALANCE_KEY), '11')

    def test_corrupt_file_starts_empty(self) -> None:
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write('{not json')
        self.assertIsNone(JsonFileStorage(self.path, 'sui@sui').get(BALANCE_KEY))


if __name__ == "__main__":
    unittest.main()
