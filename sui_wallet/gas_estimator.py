"""
Gas Estimator

Derives a safe gas budget with a simulate-then-commit protocol:
1. Dry-run the transfer with an oversized placeholder budget and no gas payment
2. Reject non-success simulations
3. Budget = computation + overhead + storage - rebate, never below
   computation + overhead
"""

import base64
from typing import Dict, Optional

from loguru import logger

from .errors import SimulationError
from .models import GasBudget
from .transfer_assembler import TransactionSerializer, TransferTransaction, serialize_transaction


GAS_SAFE_OVERHEAD = 1000
MAX_GAS = 50_000_000_000


def compute_gas_budget(gas_used: Dict, gas_price: Optional[int]) -> GasBudget:
    """
    Compute a budget from simulated gas usage

    Args:
        gas_used: {computationCost, storageCost, storageRebate} (ints or strings)
        gas_price: Reference gas price, 1 when unknown

    Returns:
        GasBudget floored at computation cost plus overhead
    """
    safe_overhead = GAS_SAFE_OVERHEAD * int(gas_price or 1)
    base_cost = int(gas_used['computationCost']) + safe_overhead
    budget = (
        base_cost
        + int(gas_used['storageCost'])
        - int(gas_used['storageRebate'])
    )
    return GasBudget(budget_value=max(budget, base_cost))


class GasEstimator:
    """
    Dry-run based budget estimation

    Features:
    - Placeholder budget so the trial needs no real funds
    - Structured SimulationError carrying the node's cause
    - Floor guarantee when storage rebates exceed storage cost
    """

    def __init__(self, api, serializer: TransactionSerializer = serialize_transaction):
        """
        Initialize estimator

        Args:
            api: Node API collaborator providing `dry_run_transaction()`
            serializer: Transaction encoder
        """
        self.api = api
        self.serializer = serializer

    async def estimate(self, tx: TransferTransaction) -> GasBudget:
        """
        Estimate the budget for an assembled, unbudgeted transfer

        Args:
            tx: Transfer with gas price set

        Returns:
            GasBudget

        Raises:
            SimulationError: Dry run did not succeed
        """
        trial = tx.with_budget(MAX_GAS).with_gas_payment([])
        encoded = base64.b64encode(self.serializer(trial)).decode('ascii')

        result = await self.api.dry_run_transaction(encoded)
        effects = result.get('effects') or {}
        status = effects.get('status') or {}

        if status.get('status') != 'success':
            cause = status.get('error')
            logger.error(f"✗ Dry run failed: {cause}")
            raise SimulationError(cause, result)

        budget = compute_gas_budget(effects['gasUsed'], tx.gas_price)
        logger.debug(f"Gas budget estimated: {budget.budget_value} (gas price {tx.gas_price})")
        return budget
