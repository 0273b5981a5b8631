"""
Platform Fee (csFee)

An additional fee split to the platform's address on native coin transfers.
The ratio is applied to the transferred value; optional USD bounds are
converted to base units with the caller's price.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_DOWN
from typing import Dict, Optional

from loguru import logger


@dataclass
class PlatformFeeConfig:
    """Platform fee settings for one crypto"""
    disabled: bool = True
    address: Optional[str] = None
    fee: Decimal = Decimal('0')
    min_fee: Optional[Decimal] = None  # USD
    max_fee: Optional[Decimal] = None  # USD

    @classmethod
    def from_api(cls, data: Dict) -> 'PlatformFeeConfig':
        """Parse the platform API response"""
        def _decimal(value) -> Optional[Decimal]:
            return Decimal(str(value)) if value is not None else None

        config = cls(
            disabled=bool(data.get('disabled', False)) or not data.get('address'),
            address=data.get('address'),
            fee=_decimal(data.get('fee')) or Decimal('0'),
            min_fee=_decimal(data.get('minFee')),
            max_fee=_decimal(data.get('maxFee')),
        )
        if config.disabled:
            logger.debug("Platform fee disabled")
        return config


def _usd_to_units(usd: Decimal, price: float, decimals: int) -> int:
    units = usd / Decimal(str(price)) * (Decimal(10) ** decimals)
    return int(units.to_integral_value(rounding=ROUND_DOWN))


def _clamp(
    fee: int,
    config: PlatformFeeConfig,
    price: Optional[float],
    decimals: int,
    dust_threshold: int
) -> int:
    if price:
        if config.min_fee is not None:
            fee = max(fee, _usd_to_units(config.min_fee, price, decimals))
        if config.max_fee is not None:
            fee = min(fee, _usd_to_units(config.max_fee, price, decimals))
    if fee < dust_threshold:
        return 0
    return fee


def calculate_platform_fee(
    value: int,
    config: PlatformFeeConfig,
    price: Optional[float],
    decimals: int,
    dust_threshold: int = 1
) -> int:
    """
    Platform fee for transferring `value`

    Args:
        value: Transfer value in base units
        config: Platform fee settings
        price: USD price of one whole coin (None skips USD bounds)
        decimals: Coin decimals
        dust_threshold: Smallest output worth creating

    Returns:
        Fee in base units, 0 when disabled or below dust
    """
    if config.disabled or value <= 0:
        return 0
    fee = int((Decimal(value) * config.fee).to_integral_value(rounding=ROUND_DOWN))
    return _clamp(fee, config, price, decimals, dust_threshold)


def calculate_platform_fee_for_max_amount(
    available: int,
    config: PlatformFeeConfig,
    price: Optional[float],
    decimals: int,
    dust_threshold: int = 1
) -> int:
    """
    Platform fee when sending everything: value + fee == available

    Args:
        available: Spendable amount after the network fee

    Returns:
        Fee in base units, never more than `available`
    """
    if config.disabled or available <= 0:
        return 0
    ratio = config.fee / (1 + config.fee)
    fee = int((Decimal(available) * ratio).to_integral_value(rounding=ROUND_DOWN))
    return min(_clamp(fee, config, price, decimals, dust_threshold), available)
