"""Shared test data and fakes: node responses, storage and signer."""

import base64
import json
from typing import Dict, List, Optional
from urllib.parse import unquote

import httpx

from sui_wallet.models import AssetKind, Crypto, SignedTransaction


ADDRESS = '0x0e6a8dcaee3fc4769c650bc914b0a2b35e60ba1f06839a6f7b308feaafa3e509'
SECOND_ADDRESS = '0xcc2bd176a478baea9a0de7a24cd927661cc6e860d5bacecb9a138ef20dbab231'
THIRD_ADDRESS = '0xfe09cf0b3d77678b99250572624bf74fe3b12af915c5db95f0ed5d755612eb68'
FEE_ADDRESS = '0x5b2ac7e2fb4ff5a5cad23b3c0e5a50ea4b4fd96e2b5d9d23a1bf41cb8d5b7a10'

SUI = '0x2::sui::SUI'
USDC = '0xa1ec7fc00a6f40db9693ad1415d0c193ad3906494428cf252621037bd7117e29::usdc::USDC'

SUI_CRYPTO = Crypto('sui@sui', AssetKind.native(), 9)
USDC_CRYPTO = Crypto('usd-coin@sui', AssetKind.token(USDC), 6)

NODE_URL = 'https://node.test/'
PLATFORM_URL = 'https://platform.test/'


def coin_object(object_id: str, balance: int, version: int = 1) -> Dict:
    return {
        'coinObjectId': object_id,
        'version': str(version),
        'digest': f"digest-{object_id}",
        'balance': str(balance),
    }


# sums to 4_936_421_995
COINS = [
    coin_object('0xc1', 1_500_000_000),
    coin_object('0xc2', 3_000_000_000),
    coin_object('0xc3', 436_421_995),
]

# sums to 700_000_000
TOKENS = [
    coin_object('0xt1', 200_000_000),
    coin_object('0xt2', 500_000_000),
]

GAS_USED = {
    'computationCost': '1000000',
    'storageCost': '1976000',
    'storageRebate': '978120',
}

# computation 1_000_000 + overhead 1000 * 1000 + storage 1_976_000 - rebate 978_120
EXPECTED_BUDGET = 2_997_880

DRY_RUN_SUCCESS = {
    'effects': {
        'status': {'status': 'success'},
        'gasUsed': GAS_USED,
    }
}

DRY_RUN_FAILURE = {
    'effects': {
        'status': {'status': 'failure', 'error': 'InsufficientCoinBalance in command 0'},
        'gasUsed': GAS_USED,
    }
}

EXECUTE_COIN = {
    'digest': 'DigestCoin111',
    'effects': {'status': {'status': 'success'}, 'gasUsed': GAS_USED},
    'balanceChanges': [
        {'owner': {'AddressOwner': ADDRESS}, 'coinType': SUI, 'amount': '-1002997880'},
        {'owner': {'AddressOwner': SECOND_ADDRESS}, 'coinType': SUI, 'amount': '1000000000'},
    ],
}

EXECUTE_TOKEN = {
    'digest': 'DigestToken222',
    'effects': {'status': {'status': 'success'}, 'gasUsed': GAS_USED},
    'balanceChanges': [
        {'owner': {'AddressOwner': ADDRESS}, 'coinType': SUI, 'amount': '-1997880'},
        {'owner': {'AddressOwner': ADDRESS}, 'coinType': USDC, 'amount': '-100000000'},
        {'owner': {'AddressOwner': SECOND_ADDRESS}, 'coinType': USDC, 'amount': '100000000'},
    ],
}

TRANSACTIONS = {
    'transactions': [
        {
            'id': 'TxIncomingSui',
            'sender': SECOND_ADDRESS,
            'status': 'SUCCESS',
            'timestamp': '1700000100000',
            'fee': '47445880',
            'balanceChanges': [
                {'owner': SECOND_ADDRESS, 'coinType': SUI, 'amount': '-1047445880'},
                {'owner': ADDRESS, 'coinType': SUI, 'amount': '1000000000'},
            ],
        },
        {
            'id': 'TxOutgoingToken',
            'sender': ADDRESS,
            'status': 'SUCCESS',
            'timestamp': '1700000300000',
            'fee': '2345504',
            'balanceChanges': [
                {'owner': ADDRESS, 'coinType': SUI, 'amount': '-2345504'},
                {'owner': ADDRESS, 'coinType': USDC, 'amount': '-1000000'},
                {'owner': SECOND_ADDRESS, 'coinType': USDC, 'amount': '1000000'},
            ],
        },
        {
            'id': 'TxIncomingToken',
            'sender': THIRD_ADDRESS,
            'status': 'SUCCESS',
            'timestamp': '1700000050000',
            'fee': '2445504',
            'balanceChanges': [
                {'owner': THIRD_ADDRESS, 'coinType': SUI, 'amount': '-2445504'},
                {'owner': THIRD_ADDRESS, 'coinType': USDC, 'amount': '-10000000'},
                {'owner': ADDRESS, 'coinType': USDC, 'amount': '10000000'},
            ],
        },
        {
            'id': 'TxOutgoingSui',
            'sender': ADDRESS,
            'status': 'FAILURE',
            'timestamp': '1700000200000',
            'fee': '2985880',
            'balanceChanges': [
                {'owner': ADDRESS, 'coinType': SUI, 'amount': '-565226544'},
                {'owner': FEE_ADDRESS, 'coinType': SUI, 'amount': '62240664', 'csfee': True},
                {'owner': SECOND_ADDRESS, 'coinType': SUI, 'amount': '500000000'},
            ],
        },
    ],
    'hasMore': False,
    'cursor': 'eyJjIjoxNTAzNDU4NjR9',
}

PLATFORM_FEE = {
    'fee': 0.005,
    'minFee': 0.5,
    'maxFee': 100,
    'address': FEE_ADDRESS,
}


def decode_transaction(encoded: str) -> Dict:
    """Decode a base64 canonical-JSON transaction"""
    return json.loads(base64.b64decode(encoded))


class FakeNode:
    """
    httpx MockTransport handler emulating the node and platform APIs

    Every request is recorded in `calls` as (method, path, params, body).
    """

    def __init__(
        self,
        coins: Optional[List[Dict]] = None,
        tokens: Optional[List[Dict]] = None,
        gas_price: int = 1000,
        dry_run: Optional[Dict] = None,
        execute: Optional[Dict] = None,
        platform_fee: Optional[Dict] = None,
        page_size: Optional[int] = None
    ):
        self.coins = COINS if coins is None else coins
        self.tokens = TOKENS if tokens is None else tokens
        self.gas_price = gas_price
        self.dry_run = dry_run or DRY_RUN_SUCCESS
        self.execute = execute or EXECUTE_COIN
        self.platform_fee = platform_fee or {'disabled': True}
        self.page_size = page_size
        self.fail_paths: List[str] = []
        self.calls: List[tuple] = []

    def calls_to(self, fragment: str) -> List[tuple]:
        return [call for call in self.calls if fragment in call[1]]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=NODE_URL, transport=self.transport())

    def _page(self, items: List[Dict], params: Dict) -> Dict:
        if not self.page_size:
            return {'data': items, 'nextCursor': None, 'hasNextPage': False}
        start = int(params.get('cursor') or 0)
        end = start + self.page_size
        return {
            'data': items[start:end],
            'nextCursor': str(end),
            'hasNextPage': end < len(items),
        }

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = unquote(request.url.path)
        params = dict(request.url.params)
        body = json.loads(request.content) if request.content else None
        self.calls.append((request.method, path, params, body))

        if any(fragment in path for fragment in self.fail_paths):
            return httpx.Response(500, json={'error': 'node unavailable'})

        if path == f"/api/v1/token/{SUI}/{ADDRESS}/objects":
            return httpx.Response(200, json=self._page(self.coins, params))
        if path == f"/api/v1/token/{USDC}/{ADDRESS}/objects":
            return httpx.Response(200, json=self._page(self.tokens, params))
        if path == '/api/v1/gasPrice':
            return httpx.Response(200, json={'price': self.gas_price})
        if path == '/api/v1/transaction/dryRun':
            return httpx.Response(200, json=self.dry_run)
        if path == '/api/v1/transaction/send':
            return httpx.Response(200, json=self.execute)
        if path == f"/api/v1/address/{ADDRESS}/transactions":
            return httpx.Response(200, json=TRANSACTIONS)
        if path == '/api/v1/unalias':
            if params.get('alias') == 'example.sui':
                return httpx.Response(200, json={'address': THIRD_ADDRESS})
            return httpx.Response(404, json={'error': 'not found'})
        if path == '/api/v4/csfee':
            return httpx.Response(200, json=self.platform_fee)
        return httpx.Response(404, json={'error': f"unknown path {path}"})


class FakeStorage:
    """In-memory key-value storage collaborator"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data = dict(initial or {})
        self.saves = 0

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str):
        self.data[key] = value

    def save(self):
        self.saves += 1


class FakeSigner:
    """Signs by echoing the bytes; records what it signed"""

    def __init__(self):
        self.signed: List[bytes] = []

    def sign_transaction(self, tx_bytes: bytes) -> SignedTransaction:
        self.signed.append(tx_bytes)
        return SignedTransaction(
            transaction=base64.b64encode(tx_bytes).decode('ascii'),
            signature='fake-signature',
        )
