"""
Sui Wallet Engine

Transaction economics for one account and one held asset:
1. Load: list objects, resync cached balances, select sendable inputs
2. Validate: destination address and amount (dust, max, native fee coverage)
3. Estimate: dry-run the assembled transfer for a gas budget
4. Create: re-assemble with the budget, sign, submit, adjust cached balances
5. History: reconstruct typed transactions from the node's ledger feed

Operations on one wallet instance must not run concurrently; each awaits its
network round trips in sequence.
"""

import asyncio
from typing import Dict, List, Optional

import httpx
from loguru import logger

from .addresses import is_valid_address, is_valid_suins_name, normalize_address
from .balance_tracker import BalanceTracker
from .cache import QueryCache
from .config import WalletConfig
from .errors import (
    BigAmountError,
    DestinationEqualsSourceError,
    InsufficientCoinForTransactionFeeError,
    InsufficientFundsError,
    InternalWalletError,
    InvalidAddressError,
    SmallAmountError,
)
from .gas_estimator import GasEstimator
from .history import HistoryReconstructor
from .models import (
    Amount,
    AssetKind,
    Crypto,
    SpendableObject,
    TransactionPage,
    TransferIntent,
    WalletState,
)
from .node_api import NodeAPI
from .object_selector import ObjectSelector
from .platform_fee import calculate_platform_fee, calculate_platform_fee_for_max_amount
from .transfer_assembler import (
    TransactionSerializer,
    TransferAssembler,
    TransferTransaction,
    serialize_transaction,
)


async def graceful_shutdown(wallet: 'SuiWallet', timeout: float = 5.0):
    """
    Tear down a wallet: invalidate cached queries and close the HTTP client

    Args:
        wallet: SuiWallet instance to shut down
        timeout: Maximum time to wait for the client to close (seconds)
    """
    logger.info("Starting wallet shutdown...")
    wallet.cleanup()
    try:
        await asyncio.wait_for(wallet.api.aclose(), timeout=timeout)
        logger.info("✓ Wallet shutdown complete")
    except asyncio.TimeoutError:
        logger.warning(f"Shutdown timeout after {timeout}s, HTTP client may not be closed")


class SuiWallet:
    """
    Account engine for a native coin or token on Sui

    Features:
    - Greedy input selection capped at 250 objects
    - Simulate-then-commit gas budgeting
    - Platform fee split on native coin transfers
    - Cached, persisted, never-negative balance
    - History reconstruction from balance changes

    Collaborators:
    - storage: get/set/save key-value store (persists "balance")
    - signer: sign_transaction(tx_bytes) -> SignedTransaction
    - api: NodeAPI (created from config when omitted)
    """

    DUST_THRESHOLD = 1

    def __init__(
        self,
        crypto: Crypto,
        platform: Crypto,
        address: str,
        storage,
        signer=None,
        config: Optional[WalletConfig] = None,
        api: Optional[NodeAPI] = None,
        serializer: TransactionSerializer = serialize_transaction
    ):
        """
        Initialize wallet

        Args:
            crypto: Held asset
            platform: Native asset of the chain (pays every fee)
            address: Account address
            storage: Key-value storage collaborator
            signer: Transaction signer (required for create_transaction)
            config: Wallet configuration
            api: Node API collaborator
            serializer: Transaction encoder shared by dry run and submission
        """
        if not platform.asset.is_native:
            raise InternalWalletError("Platform crypto must be the native coin")
        if not (crypto.asset.is_native or crypto.asset.is_token):
            raise InternalWalletError(f"Unsupported asset kind: {crypto.asset!r}")

        self.config = config or WalletConfig()
        self.crypto = crypto
        self.platform = platform
        self.address = normalize_address(address)
        self.storage = storage
        self.signer = signer
        self.serializer = serializer

        self.api = api or NodeAPI(
            self.config.node_url,
            self.address,
            platform_api_url=self.config.platform_api_url,
            tx_per_page=self.config.tx_per_page,
            timeout=self.config.request_timeout_seconds,
            cache=QueryCache(self.config.cache_ttl_seconds),
        )
        self.selector = ObjectSelector()
        self.assembler = TransferAssembler(self.api)
        self.estimator = GasEstimator(self.api, serializer)
        self.tracker = BalanceTracker(storage, crypto.asset)
        self.history = HistoryReconstructor(
            self.address, crypto, platform, development=self.config.development
        )

        self.state = WalletState.CREATED
        self._sendable_coin_objects: List[SpendableObject] = []
        self._sendable_token_objects: List[SpendableObject] = []
        self._selection_stale = False

    @property
    def native(self) -> AssetKind:
        return self.platform.asset

    @property
    def balance(self) -> Amount:
        return Amount(self.tracker.balance(self.crypto.asset), self.crypto.decimals)

    @property
    def is_platform_fee_supported(self) -> bool:
        return self.crypto.asset.is_native

    @property
    def token_url(self) -> Optional[str]:
        if not self.crypto.asset.is_token:
            return None
        network = 'testnet' if self.config.development else 'mainnet'
        return f"https://suiscan.xyz/{network}/coin/{self.crypto.asset.address}"

    def initialize(self):
        """Seed the cached balance from storage"""
        balance = self.tracker.seed_from_storage()
        self.state = WalletState.INITIALIZED
        logger.debug(f"Wallet {self.crypto.crypto_id} initialized with stored balance {balance}")

    async def load(self):
        """
        Full resync: list objects, recompute balances, select inputs

        Raises:
            Any transport error, after moving the wallet to ERROR
        """
        self.state = WalletState.LOADING
        try:
            await self._refresh_selection(resync=True)
        except Exception as e:
            self.state = WalletState.ERROR
            logger.error(f"✗ Failed to load wallet {self.crypto.crypto_id}: {e!r}")
            raise

        self.state = WalletState.LOADED
        logger.info(f"✓ Wallet {self.crypto.crypto_id} loaded, balance {self.balance}")

    async def _refresh_selection(self, resync: bool):
        coin_objects = await self.api.get_objects(self.native.coin_type)
        if resync:
            self.tracker.resync(self.native, coin_objects)
        self._sendable_coin_objects = self.selector.select(coin_objects)

        if self.crypto.asset.is_token:
            token_objects = await self.api.get_objects(self.crypto.asset.coin_type)
            if resync:
                self.tracker.resync(self.crypto.asset, token_objects)
            self._sendable_token_objects = self.selector.select(token_objects)

        self._selection_stale = False

    async def _ensure_selection(self):
        # object versions change after every submission
        if self._selection_stale:
            logger.debug("Refreshing stale object selection")
            await self._refresh_selection(resync=False)

    def cleanup(self):
        """Invalidate memoized node queries (wallet teardown)"""
        self.api.cleanup()

    def validate_address(self, address: str) -> bool:
        """
        Validate a destination address

        Raises:
            InvalidAddressError: Not a 32-byte hex address
            DestinationEqualsSourceError: Address is the account's own
        """
        if not is_valid_address(address):
            raise InvalidAddressError(address)
        if normalize_address(address) == self.address:
            raise DestinationEqualsSourceError()
        return True

    async def validate_amount(self, address: str, amount: Amount, price: Optional[float] = None) -> bool:
        """
        Validate a transfer amount

        Args:
            address: Destination address
            amount: Amount in the held asset
            price: USD price of the held asset (platform fee bounds)

        Raises:
            SmallAmountError: Below the dust threshold
            InsufficientCoinForTransactionFeeError: Token transfer fee exceeds native balance
            BigAmountError: Above the spendable maximum
        """
        value = amount.value
        if value < self.DUST_THRESHOLD:
            raise SmallAmountError(Amount(self.DUST_THRESHOLD, self.crypto.decimals))

        if self.crypto.asset.is_token:
            miner_fee = await self._estimate_miner_fee(TransferIntent(address, value))
            if miner_fee > self.tracker.balance(self.native):
                raise InsufficientCoinForTransactionFeeError(Amount(miner_fee, self.platform.decimals))

        max_amount = await self._estimate_max_amount(address, price)
        if value > max_amount:
            raise BigAmountError(Amount(max_amount, self.crypto.decimals))
        return True

    async def _create_transfer(self, intent: TransferIntent) -> TransferTransaction:
        await self._ensure_selection()
        return await self.assembler.assemble(
            self.address,
            self.crypto.asset,
            intent,
            gas_objects=self._sendable_coin_objects,
            token_objects=self._sendable_token_objects,
        )

    async def _estimate_miner_fee(self, intent: TransferIntent) -> int:
        tx = await self._create_transfer(intent)
        budget = await self.estimator.estimate(tx)
        return budget.budget_value

    async def _platform_fee_intent(self, address: str, value: int, price: Optional[float]) -> TransferIntent:
        fee_config = await self.api.get_platform_fee_config(self.crypto.crypto_id)
        platform_fee = calculate_platform_fee(
            value, fee_config, price, self.crypto.decimals, self.DUST_THRESHOLD
        )
        return TransferIntent(address, value, platform_fee, fee_config.address)

    async def estimate_transaction_fee(self, address: str, amount: Amount, price: Optional[float] = None) -> Amount:
        """
        Estimate the total fee for a transfer

        Returns:
            Network fee plus platform fee (coin decimals) for native accounts,
            network fee in native decimals for token accounts
        """
        if self.crypto.asset.is_native:
            intent = await self._platform_fee_intent(address, amount.value, price)
            miner_fee = await self._estimate_miner_fee(intent)
            logger.debug(f"Fee estimate: network {miner_fee}, platform {intent.platform_fee_value}")
            return Amount(miner_fee + intent.platform_fee_value, self.crypto.decimals)

        miner_fee = await self._estimate_miner_fee(TransferIntent(address, amount.value))
        return Amount(miner_fee, self.platform.decimals)

    async def _estimate_max_amount(self, address: str, price: Optional[float]) -> int:
        if self.crypto.asset.is_token:
            if self.tracker.balance(self.crypto.asset) == 0:
                return 0
            await self._ensure_selection()
            return ObjectSelector.total_balance(self._sendable_token_objects)

        if self.tracker.balance(self.native) == 0:
            return 0

        fee_config = await self.api.get_platform_fee_config(self.crypto.crypto_id)
        miner_fee = await self._estimate_miner_fee(TransferIntent(
            address,
            1,
            platform_fee_value=0 if fee_config.disabled else 1,
            platform_fee_address=None if fee_config.disabled else fee_config.address,
        ))
        sendable = ObjectSelector.total_balance(self._sendable_coin_objects)
        if sendable < miner_fee:
            return 0

        platform_fee = calculate_platform_fee_for_max_amount(
            sendable - miner_fee, fee_config, price, self.crypto.decimals, self.DUST_THRESHOLD
        )
        return max(sendable - miner_fee - platform_fee, 0)

    async def estimate_max_amount(self, address: str, price: Optional[float] = None) -> Amount:
        """Largest amount of the held asset that can be sent to `address`"""
        return Amount(await self._estimate_max_amount(address, price), self.crypto.decimals)

    async def create_transaction(self, address: str, amount: Amount, price: Optional[float] = None) -> str:
        """
        Budget, sign and submit a transfer, then adjust cached balances

        Args:
            address: Destination address
            amount: Amount in the held asset
            price: USD price of the held asset (platform fee bounds)

        Returns:
            Transaction digest
        """
        if self.signer is None:
            raise InternalWalletError("Wallet has no signer")

        await self._ensure_selection()
        if not self._sendable_coin_objects:
            raise InsufficientFundsError("No native coin objects to pay gas")

        value = amount.value
        if self.crypto.asset.is_native:
            intent = await self._platform_fee_intent(address, value, price)
        else:
            intent = TransferIntent(address, value)

        tx = await self._create_transfer(intent)
        budget = await self.estimator.estimate(tx)
        tx = tx.with_budget(budget.budget_value)

        signed = self.signer.sign_transaction(self.serializer(tx))
        result = await self.api.execute_transaction(signed.transaction, signed.signature)

        self.api.cleanup()
        self._selection_stale = True

        if self.crypto.asset.is_native:
            self.tracker.apply_commit_delta(self.native, self._own_balance_change(result))
        else:
            gas_used = result['effects']['gasUsed']
            total_fee = (
                int(gas_used['computationCost'])
                + int(gas_used['storageCost'])
                - int(gas_used['storageRebate'])
            )
            self.tracker.apply_commit_delta(self.native, -total_fee)
            self.tracker.apply_commit_delta(self.crypto.asset, -value)

        logger.info(f"✓ Transfer of {amount} {self.crypto.crypto_id} committed: {result['digest']}")
        return result['digest']

    def _own_balance_change(self, result: Dict) -> int:
        for change in result.get('balanceChanges') or []:
            owner = change.get('owner')
            if isinstance(owner, dict):
                owner = owner.get('AddressOwner')
            if not owner or normalize_address(owner) != self.address:
                continue
            if change.get('coinType', self.native.coin_type) == self.native.coin_type:
                return int(change['amount'])
        logger.warning("No own balance change in execution result")
        return 0

    async def load_transactions(self, cursor: Optional[str] = None) -> TransactionPage:
        """
        Load one page of history

        Args:
            cursor: Page cursor from the previous page

        Returns:
            TransactionPage, newest first
        """
        data = await self.api.get_transactions(self.address, cursor, self.config.tx_per_page)
        return TransactionPage(
            transactions=self.history.reconstruct_page(data.get('transactions') or []),
            has_more=bool(data.get('hasMore')),
            cursor=data.get('cursor'),
        )

    async def unalias(self, alias) -> Optional[Dict[str, str]]:
        """
        Resolve a SuiNS name

        Returns:
            {alias, address} or None for invalid names and failed lookups
        """
        if not is_valid_suins_name(alias):
            return None
        try:
            res = await self.api.unalias(alias)
            return {'alias': alias, 'address': res['address']}
        except (httpx.HTTPError, KeyError, TypeError) as e:
            logger.warning(f"Alias lookup failed for {alias}: {e!r}")
            return None
