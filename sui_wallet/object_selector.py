"""
Object Selector

Chooses which coin objects to use as transaction inputs:
largest balances first, bounded by the ledger's input object limit.
"""

from typing import Iterable, List

from loguru import logger

from .models import SpendableObject


class ObjectSelector:
    """
    Greedy input selection

    Features:
    - Descending-balance ranking (fewest inputs for a given target sum)
    - Hard cap on selected inputs
    - Pure function over a snapshot, no side effects

    Order among objects with equal balance is not part of the contract.
    """

    MAX_INPUT_OBJECTS = 250

    def __init__(self, max_inputs: int = MAX_INPUT_OBJECTS):
        """
        Initialize selector

        Args:
            max_inputs: Maximum number of objects to select
        """
        if max_inputs <= 0:
            raise ValueError("max_inputs must be positive")
        self.max_inputs = max_inputs

    def select(self, objects: Iterable[SpendableObject]) -> List[SpendableObject]:
        """
        Select spendable objects

        Args:
            objects: All objects owned for one asset

        Returns:
            Up to max_inputs objects, largest balance first
        """
        ranked = sorted(objects, key=lambda obj: obj.balance, reverse=True)
        selected = ranked[:self.max_inputs]

        if len(ranked) > len(selected):
            logger.debug(
                f"Selected {len(selected)} of {len(ranked)} objects "
                f"(input cap {self.max_inputs})"
            )
        return selected

    @staticmethod
    def total_balance(objects: Iterable[SpendableObject]) -> int:
        return sum(obj.balance for obj in objects)
