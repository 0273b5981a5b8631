"""
Wallet Data Model

Value types shared by the selector, assembler, estimator, balance tracker
and history reconstructor. All ledger values are Python integers (arbitrary
precision); floating point is never used for balances or fees.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


NATIVE_COIN_TYPE = '0x2::sui::SUI'


class WalletState(Enum):
    """Account lifecycle states"""
    CREATED = 'created'
    INITIALIZED = 'initialized'
    LOADING = 'loading'
    LOADED = 'loaded'
    ERROR = 'error'


class TransactionStatus(Enum):
    SUCCESS = 'success'
    FAILED = 'failed'


class TransactionAction(Enum):
    TRANSFER = 'transfer'
    TOKEN_TRANSFER = 'token_transfer'


@dataclass(frozen=True)
class AssetKind:
    """
    Held asset variant

    Either the native coin or a token identified by its coin type address.
    Use AssetKind.native() / AssetKind.token(address) to construct.
    """
    kind: str  # 'coin' or 'token'
    address: Optional[str] = None

    @classmethod
    def native(cls) -> 'AssetKind':
        return cls(kind='coin')

    @classmethod
    def token(cls, address: str) -> 'AssetKind':
        if not address:
            raise ValueError("Token asset requires a coin type address")
        return cls(kind='token', address=address)

    @property
    def is_native(self) -> bool:
        return self.kind == 'coin'

    @property
    def is_token(self) -> bool:
        return self.kind == 'token'

    @property
    def coin_type(self) -> str:
        """Coin type used by the node for object listing and balance changes"""
        if self.is_native:
            return NATIVE_COIN_TYPE
        return self.address

    def __repr__(self):
        if self.is_native:
            return "AssetKind(native)"
        return f"AssetKind(token={self.address})"


@dataclass(frozen=True)
class Crypto:
    """Asset held by an account: catalogue id, kind and display decimals"""
    crypto_id: str  # e.g. 'sui@sui', 'usd-coin@sui'
    asset: AssetKind
    decimals: int


@dataclass(frozen=True)
class Amount:
    """Integer amount in base units together with its decimals"""
    value: int
    decimals: int

    def __post_init__(self):
        if self.value < 0:
            raise ValueError(f"Amount cannot be negative: {self.value}")

    def __str__(self):
        whole, frac = divmod(self.value, 10 ** self.decimals)
        if self.decimals == 0:
            return str(whole)
        return f"{whole}.{frac:0{self.decimals}d}".rstrip('0').rstrip('.')


@dataclass(frozen=True)
class SpendableObject:
    """One on-chain coin object usable as a transaction input"""
    object_id: str
    version: str
    digest: str
    balance: int

    @classmethod
    def from_node(cls, data: Dict) -> 'SpendableObject':
        """Build from a node object listing entry"""
        return cls(
            object_id=data['coinObjectId'],
            version=str(data['version']),
            digest=data['digest'],
            balance=int(data['balance']),
        )

    def __post_init__(self):
        if self.balance < 0:
            raise ValueError(f"Object {self.object_id} has negative balance")


@dataclass
class TransferIntent:
    """Input to transfer assembly"""
    destination_address: str
    value: int
    platform_fee_value: int = 0
    platform_fee_address: Optional[str] = None

    @property
    def has_platform_fee(self) -> bool:
        return self.platform_fee_value > 0 and bool(self.platform_fee_address)


@dataclass(frozen=True)
class GasBudget:
    """Execution budget computed by simulation"""
    budget_value: int


@dataclass
class DomainTransaction:
    """Human-meaningful transaction reconstructed from a ledger record"""
    id: str
    from_address: str
    to_address: str
    amount: Amount
    incoming: bool
    fee: Amount
    timestamp: datetime
    status: TransactionStatus
    action: TransactionAction = TransactionAction.TRANSFER
    development: bool = False

    @property
    def url(self) -> str:
        """Explorer link"""
        network = 'testnet' if self.development else 'mainnet'
        return f"https://suiscan.xyz/{network}/tx/{self.id}"

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['amount'] = str(self.amount)
        data['fee'] = str(self.fee)
        data['timestamp'] = self.timestamp.isoformat()
        data['status'] = self.status.value
        data['action'] = self.action.value
        data['url'] = self.url
        return data


@dataclass(frozen=True)
class SignedTransaction:
    """Signer output ready for submission"""
    transaction: str  # base64 transaction bytes
    signature: str


@dataclass
class TransactionPage:
    """One page of reconstructed history"""
    transactions: List[DomainTransaction] = field(default_factory=list)
    has_more: bool = False
    cursor: Optional[str] = None
