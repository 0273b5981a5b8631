"""
Sui Wallet Engine

Transaction economics for a Sui account client: input selection, gas
budgeting by simulation, transfer assembly, cached balances and history
reconstruction.

Components:
- object_selector: Largest-first input selection (max 250 objects)
- transfer_assembler: Unsigned split/merge/transfer command sets
- gas_estimator: Dry-run based gas budget with a safety floor
- balance_tracker: Cached, persisted, never-negative balances
- history: Ledger records to typed transactions
- platform_fee: Platform fee (csFee) calculation
- node_api: Async node client with memoized read-only queries
- wallet: Account engine composing all of the above

Transfer Flow:
1. Load - list objects, resync balances, select inputs
2. Assemble - build the transfer with gas price and gas payment
3. Simulate - dry-run with a placeholder budget
4. Budget - computation + overhead + storage - rebate (floored)
5. Submit - re-assemble with the budget, sign, execute
6. Adjust - apply the committed delta to cached balances
"""

from .balance_tracker import (
    BalanceTracker,
    JsonFileStorage,
    TrackerState,
)
from .cache import (
    QueryCache,
)
from .config import (
    WalletConfig,
)
from .errors import (
    BigAmountError,
    DestinationEqualsSourceError,
    InsufficientCoinForTransactionFeeError,
    InsufficientFundsError,
    InternalWalletError,
    InvalidAddressError,
    SimulationError,
    SmallAmountError,
    ValidationError,
    WalletError,
)
from .gas_estimator import (
    GasEstimator,
    compute_gas_budget,
)
from .history import (
    HistoryReconstructor,
)
from .models import (
    Amount,
    AssetKind,
    Crypto,
    DomainTransaction,
    GasBudget,
    SignedTransaction,
    SpendableObject,
    TransactionAction,
    TransactionPage,
    TransactionStatus,
    TransferIntent,
    WalletState,
)
from .node_api import (
    NodeAPI,
)
from .object_selector import (
    ObjectSelector,
)
from .platform_fee import (
    PlatformFeeConfig,
    calculate_platform_fee,
    calculate_platform_fee_for_max_amount,
)
from .transfer_assembler import (
    TransferAssembler,
    TransferTransaction,
    serialize_transaction,
)
from .wallet import (
    SuiWallet,
    graceful_shutdown,
)

__all__ = [
    # Engine
    'SuiWallet',
    'graceful_shutdown',
    'WalletConfig',

    # Components
    'ObjectSelector',
    'TransferAssembler',
    'TransferTransaction',
    'serialize_transaction',
    'GasEstimator',
    'compute_gas_budget',
    'BalanceTracker',
    'TrackerState',
    'JsonFileStorage',
    'HistoryReconstructor',
    'NodeAPI',
    'QueryCache',
    'PlatformFeeConfig',
    'calculate_platform_fee',
    'calculate_platform_fee_for_max_amount',

    # Data model
    'Amount',
    'AssetKind',
    'Crypto',
    'DomainTransaction',
    'GasBudget',
    'SignedTransaction',
    'SpendableObject',
    'TransactionAction',
    'TransactionPage',
    'TransactionStatus',
    'TransferIntent',
    'WalletState',

    # Errors
    'WalletError',
    'ValidationError',
    'InvalidAddressError',
    'DestinationEqualsSourceError',
    'SmallAmountError',
    'BigAmountError',
    'InsufficientCoinForTransactionFeeError',
    'InsufficientFundsError',
    'SimulationError',
    'InternalWalletError',
]

__version__ = '1.0.0'
__description__ = 'Transaction economics engine for Sui accounts'
