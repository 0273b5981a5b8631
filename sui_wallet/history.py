"""
Transaction History Reconstruction

Maps raw ledger transaction records into DomainTransactions.

Record shape (node history endpoint):
    {id, sender, status, timestamp (ms), fee,
     balanceChanges: [{owner, coinType, amount, csfee?}]}

Malformed records are dropped and logged; they never abort a page.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from loguru import logger

from .models import (
    NATIVE_COIN_TYPE,
    Amount,
    Crypto,
    DomainTransaction,
    TransactionAction,
    TransactionStatus,
)


@dataclass
class ReconstructionResult:
    """Outcome of mapping one record: a transaction, nothing, or an error"""
    transaction: Optional[DomainTransaction] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class HistoryReconstructor:
    """
    Reconstruct typed history for one account and asset

    Features:
    - Direction from the record sender
    - Platform fee (csfee-marked change) folded into outgoing native fees
    - Token transfers seen from a native account reported with zero amount
    - Newest-first ordering per page
    """

    def __init__(
        self,
        address: str,
        crypto: Crypto,
        platform: Crypto,
        development: bool = False
    ):
        """
        Initialize reconstructor

        Args:
            address: Own address
            crypto: Held asset
            platform: Native asset (fees are always denominated in it)
            development: Testnet explorer links
        """
        self.address = address
        self.crypto = crypto
        self.platform = platform
        self.development = development

    def map_record(self, record: Dict) -> ReconstructionResult:
        """Map one record without raising"""
        try:
            return ReconstructionResult(transaction=self._transform(record))
        except (KeyError, TypeError, ValueError, OverflowError, OSError) as e:
            return ReconstructionResult(error=e)

    def reconstruct_page(self, records: Iterable[Dict]) -> List[DomainTransaction]:
        """
        Map a page of records

        Args:
            records: Raw ledger records

        Returns:
            Reconstructed transactions, newest first
        """
        transactions = []
        for record in records:
            result = self.map_record(record)
            if not result.ok:
                record_id = record.get('id') if isinstance(record, dict) else None
                logger.warning(f"Skipping malformed transaction record {record_id!r}: {result.error!r}")
                continue
            if result.transaction is not None:
                transactions.append(result.transaction)

        transactions.sort(key=lambda tx: tx.timestamp, reverse=True)
        return transactions

    def _transform(self, record: Dict) -> Optional[DomainTransaction]:
        incoming = record['sender'] != self.address
        status = TransactionStatus.SUCCESS if record['status'] == 'SUCCESS' else TransactionStatus.FAILED
        timestamp = datetime.fromtimestamp(int(record['timestamp']) / 1000, tz=timezone.utc)
        changes = record['balanceChanges']
        coin_type = self.crypto.asset.coin_type
        network_fee = int(record['fee'])

        if incoming:
            transfer = next(
                (item for item in changes
                 if item['coinType'] == coin_type and item['owner'] == self.address),
                None
            )
            if transfer is None:
                return None
            return self._build(
                record, timestamp, status,
                from_address=record['sender'],
                to_address=self.address,
                amount=int(transfer['amount']),
                incoming=True,
                fee=network_fee,
            )

        if self.crypto.asset.is_native:
            # only the first outgoing entry is reconstructed
            transfer = next(
                (item for item in changes
                 if item['owner'] != self.address and item.get('csfee') is not True),
                None
            )
            if transfer is None:
                return None
            platform_fee = next(
                (int(item['amount']) for item in changes if item.get('csfee') is True),
                0
            )
            is_coin_transfer = transfer['coinType'] == NATIVE_COIN_TYPE
            return self._build(
                record, timestamp, status,
                from_address=self.address,
                to_address=transfer['owner'],
                amount=int(transfer['amount']) if is_coin_transfer else 0,
                incoming=False,
                fee=network_fee + platform_fee,
                action=TransactionAction.TRANSFER if is_coin_transfer else TransactionAction.TOKEN_TRANSFER,
            )

        transfer = next(
            (item for item in changes
             if item['coinType'] == coin_type and item['owner'] != self.address),
            None
        )
        if transfer is None:
            return None
        return self._build(
            record, timestamp, status,
            from_address=self.address,
            to_address=transfer['owner'],
            amount=int(transfer['amount']),
            incoming=False,
            fee=network_fee,
        )

    def _build(
        self,
        record: Dict,
        timestamp: datetime,
        status: TransactionStatus,
        from_address: str,
        to_address: str,
        amount: int,
        incoming: bool,
        fee: int,
        action: TransactionAction = TransactionAction.TRANSFER
    ) -> DomainTransaction:
        return DomainTransaction(
            id=record['id'],
            from_address=from_address,
            to_address=to_address,
            amount=Amount(abs(amount), self.crypto.decimals),
            incoming=incoming,
            fee=Amount(max(fee, 0), self.platform.decimals),
            timestamp=timestamp,
            status=status,
            action=action,
            development=self.development,
        )
