"""
Wallet Errors

Validation errors describe caller-input problems and carry the limit that was
violated; simulation errors carry the node's failure cause. Transport errors
from httpx are not wrapped.
"""

from typing import Dict, Optional

from .models import Amount


class WalletError(Exception):
    """Base class for every error raised by sui_wallet"""


class ValidationError(WalletError):
    """Caller input rejected before any transaction is built"""


class InvalidAddressError(ValidationError):
    def __init__(self, address: str):
        super().__init__(f"Invalid address: {address}")
        self.address = address


class DestinationEqualsSourceError(ValidationError):
    def __init__(self):
        super().__init__("Destination address equals source address")


class SmallAmountError(ValidationError):
    """Amount below the dust threshold; `amount` is the minimum"""

    def __init__(self, amount: Amount):
        super().__init__(f"Small amount, minimum is {amount}")
        self.amount = amount


class BigAmountError(ValidationError):
    """Amount above the spendable maximum; `amount` is the maximum"""

    def __init__(self, amount: Amount):
        super().__init__(f"Big amount, maximum is {amount}")
        self.amount = amount


class InsufficientCoinForTransactionFeeError(ValidationError):
    """Native balance cannot cover a token transfer's fee; `amount` is the fee"""

    def __init__(self, amount: Amount):
        super().__init__(f"Insufficient native coin for transaction fee of {amount}")
        self.amount = amount


class InsufficientFundsError(ValidationError):
    def __init__(self, message: str = "No spendable objects available"):
        super().__init__(message)


class SimulationError(WalletError):
    """Dry run reported a non-success status"""

    def __init__(self, cause: Optional[str], result: Optional[Dict] = None):
        super().__init__(
            f"Dry run failed, could not automatically determine a budget: {cause}"
        )
        self.cause = cause
        self.result = result


class InternalWalletError(WalletError):
    """Programming contract violation, not recoverable by the user"""
