"""
Transfer Assembler

Builds unsigned transfer descriptions as programmable transaction commands:
- Native coin: split the gas coin into the transfer (and platform fee) outputs
- Token: merge the selected token objects into the first, split the transfer
  amount off it; gas is paid from the native coin selection

Byte-level encoding for the ledger is delegated to a serializer. The default
serializer produces canonical JSON so dry runs and submissions are
deterministic for a given description.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Sequence, Union

from loguru import logger

from .errors import InsufficientFundsError, InternalWalletError
from .models import AssetKind, SpendableObject, TransferIntent


@dataclass(frozen=True)
class GasCoin:
    """The transaction's merged gas payment coin"""

    def to_dict(self) -> Dict:
        return {'GasCoin': True}


@dataclass(frozen=True)
class ObjectRef:
    object_id: str
    version: str
    digest: str

    @classmethod
    def of(cls, obj: SpendableObject) -> 'ObjectRef':
        return cls(object_id=obj.object_id, version=obj.version, digest=obj.digest)

    def to_dict(self) -> Dict:
        return {
            'ObjectRef': {
                'objectId': self.object_id,
                'version': self.version,
                'digest': self.digest,
            }
        }


@dataclass(frozen=True)
class NestedResult:
    """Output `index` of the command at position `command`"""
    command: int
    index: int

    def to_dict(self) -> Dict:
        return {'NestedResult': [self.command, self.index]}


Argument = Union[GasCoin, ObjectRef, NestedResult]


@dataclass(frozen=True)
class SplitCoins:
    source: Argument
    amounts: Sequence[int]

    def to_dict(self) -> Dict:
        return {
            'SplitCoins': {
                'source': self.source.to_dict(),
                'amounts': [str(amount) for amount in self.amounts],
            }
        }


@dataclass(frozen=True)
class MergeCoins:
    destination: Argument
    sources: Sequence[Argument]

    def to_dict(self) -> Dict:
        return {
            'MergeCoins': {
                'destination': self.destination.to_dict(),
                'sources': [source.to_dict() for source in self.sources],
            }
        }


@dataclass(frozen=True)
class TransferObjects:
    objects: Sequence[Argument]
    address: str

    def to_dict(self) -> Dict:
        return {
            'TransferObjects': {
                'objects': [obj.to_dict() for obj in self.objects],
                'address': self.address,
            }
        }


Command = Union[SplitCoins, MergeCoins, TransferObjects]


@dataclass(frozen=True)
class TransferTransaction:
    """Unsigned transfer description"""
    sender: str
    commands: Sequence[Command] = field(default_factory=tuple)
    gas_price: Optional[int] = None
    gas_payment: Sequence[ObjectRef] = field(default_factory=tuple)
    gas_budget: Optional[int] = None

    def with_budget(self, budget: int) -> 'TransferTransaction':
        return replace(self, gas_budget=budget)

    def with_gas_payment(self, payment: Sequence[ObjectRef]) -> 'TransferTransaction':
        return replace(self, gas_payment=tuple(payment))

    def to_dict(self) -> Dict:
        return {
            'sender': self.sender,
            'commands': [command.to_dict() for command in self.commands],
            'gasData': {
                'price': str(self.gas_price) if self.gas_price is not None else None,
                'budget': str(self.gas_budget) if self.gas_budget is not None else None,
                'payment': [ref.to_dict()['ObjectRef'] for ref in self.gas_payment],
            },
        }


TransactionSerializer = Callable[[TransferTransaction], bytes]


def serialize_transaction(tx: TransferTransaction) -> bytes:
    """Canonical JSON encoding (sorted keys, integers as strings)"""
    return json.dumps(tx.to_dict(), sort_keys=True, separators=(',', ':')).encode('utf-8')


class TransferAssembler:
    """
    Assemble transfers for native coin and token accounts

    Features:
    - Single or split output (transfer + platform fee) for native coin
    - Merge-then-split for token objects
    - Gas price from the node, gas payment from the native selection
    """

    def __init__(self, api):
        """
        Initialize assembler

        Args:
            api: Node API collaborator providing `get_gas_price()`
        """
        self.api = api

    async def assemble(
        self,
        sender: str,
        asset: AssetKind,
        intent: TransferIntent,
        gas_objects: Sequence[SpendableObject],
        token_objects: Sequence[SpendableObject] = (),
    ) -> TransferTransaction:
        """
        Build an unsigned transfer

        Args:
            sender: Own address
            asset: Held asset kind
            intent: Destination, value and optional platform fee
            gas_objects: Native coin selection used as gas payment
            token_objects: Token selection (token accounts only)

        Returns:
            TransferTransaction with gas price and gas payment set, no budget
        """
        if asset.is_native:
            commands = self._native_commands(intent)
        elif asset.is_token:
            commands = self._token_commands(intent, token_objects)
        else:
            raise InternalWalletError(f"Unsupported asset kind: {asset!r}")

        gas_price = await self.api.get_gas_price()

        tx = TransferTransaction(
            sender=sender,
            commands=tuple(commands),
            gas_price=gas_price,
            gas_payment=tuple(ObjectRef.of(obj) for obj in gas_objects),
        )
        logger.debug(
            f"Assembled {asset!r} transfer of {intent.value} to {intent.destination_address} "
            f"({len(commands)} commands, gas price {gas_price})"
        )
        return tx

    def _native_commands(self, intent: TransferIntent) -> List[Command]:
        if intent.has_platform_fee:
            return [
                SplitCoins(GasCoin(), (intent.value, intent.platform_fee_value)),
                TransferObjects((NestedResult(0, 0),), intent.destination_address),
                TransferObjects((NestedResult(0, 1),), intent.platform_fee_address),
            ]
        return [
            SplitCoins(GasCoin(), (intent.value,)),
            TransferObjects((NestedResult(0, 0),), intent.destination_address),
        ]

    def _token_commands(
        self,
        intent: TransferIntent,
        token_objects: Sequence[SpendableObject]
    ) -> List[Command]:
        if not token_objects:
            raise InsufficientFundsError("No token objects selected for transfer")

        first, rest = token_objects[0], token_objects[1:]
        primary = ObjectRef.of(first)
        commands: List[Command] = []

        if rest:
            commands.append(MergeCoins(primary, tuple(ObjectRef.of(obj) for obj in rest)))

        split_index = len(commands)
        commands.append(SplitCoins(primary, (intent.value,)))
        commands.append(
            TransferObjects((NestedResult(split_index, 0),), intent.destination_address)
        )
        return commands
