"""
Address helpers: 32-byte hex account addresses and SuiNS names.
"""

import re


SUI_ADDRESS_LENGTH = 32

_HEX_RE = re.compile(r'^(0x|0X)?[0-9a-fA-F]+$')
_SUINS_LABEL = r'[a-z0-9]([a-z0-9-]*[a-z0-9])?'
_SUINS_DOT_RE = re.compile(rf'^({_SUINS_LABEL}\.)+sui$', re.IGNORECASE)
_SUINS_AT_RE = re.compile(rf'^(({_SUINS_LABEL}\.)*{_SUINS_LABEL})?@{_SUINS_LABEL}$', re.IGNORECASE)


def normalize_address(address: str) -> str:
    """Lowercase, 0x-prefixed and left-padded to 64 hex characters"""
    value = address.lower()
    if value.startswith('0x'):
        value = value[2:]
    return '0x' + value.rjust(SUI_ADDRESS_LENGTH * 2, '0')


def is_valid_address(address) -> bool:
    if not isinstance(address, str) or not _HEX_RE.match(address):
        return False
    digits = address[2:] if address[:2].lower() == '0x' else address
    return len(digits) == SUI_ADDRESS_LENGTH * 2


def is_valid_suins_name(name) -> bool:
    """`example.sui`, `sub.example.sui` or `@example` style names"""
    if not isinstance(name, str) or len(name) > 235:
        return False
    if name.lower().endswith('.sui'):
        return bool(_SUINS_DOT_RE.match(name))
    if '@' in name:
        return bool(_SUINS_AT_RE.match(name))
    return False
