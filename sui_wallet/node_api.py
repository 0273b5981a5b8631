"""
Node API Client

Async HTTP client for the wallet node and the platform API.

Endpoints:
- GET  api/v1/token/{coinType}/{address}/objects  (paginated)
- GET  api/v1/gasPrice
- POST api/v1/transaction/dryRun
- POST api/v1/transaction/send
- GET  api/v1/address/{address}/transactions     (paginated)
- GET  api/v1/unalias
- GET  api/v4/csfee                              (platform API)

Read-only queries are memoized through QueryCache. Transport errors
(httpx.HTTPError) propagate to the caller unchanged.
"""

from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from .cache import QueryCache
from .models import NATIVE_COIN_TYPE, SpendableObject
from .platform_fee import PlatformFeeConfig


class NodeAPI:
    """
    Node API collaborator for one account

    Features:
    - Cursor pagination for object listing
    - Memoized object listing, gas price, dry run and alias lookups
    - cleanup() invalidates memoized results
    """

    def __init__(
        self,
        node_url: str,
        address: str,
        platform_api_url: Optional[str] = None,
        tx_per_page: int = 10,
        timeout: float = 30.0,
        cache: Optional[QueryCache] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize node API

        Args:
            node_url: Wallet node base URL
            address: Account address
            platform_api_url: Platform API base URL (platform fee config)
            tx_per_page: Page size for paginated endpoints
            timeout: Request timeout in seconds
            cache: Query cache (a private one is created when omitted)
            client: Preconfigured httpx client (base_url must be the node URL)
        """
        self.node_url = node_url
        self.address = address
        self.platform_api_url = platform_api_url
        self.tx_per_page = tx_per_page
        self.cache = cache if cache is not None else QueryCache()

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=node_url, timeout=timeout)

        logger.debug(f"Node API initialized: {node_url}")

    async def _request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None
    ) -> Any:
        if params:
            params = {key: value for key, value in params.items() if value is not None}
        response = await self.client.request(method, url, params=params or None, json=data)
        response.raise_for_status()
        return response.json()

    async def get_objects(self, coin_type: str = NATIVE_COIN_TYPE) -> List[SpendableObject]:
        """
        List every coin object of a type owned by the account

        Args:
            coin_type: Coin type, native coin by default

        Returns:
            All objects across pages
        """
        return await self.cache.get_or_fetch(
            ('objects', coin_type, self.address),
            lambda: self._fetch_objects(coin_type)
        )

    async def _fetch_objects(self, coin_type: str) -> List[SpendableObject]:
        objects: List[SpendableObject] = []
        cursor = None
        pages = 0

        while True:
            res = await self._request(
                'GET',
                f"api/v1/token/{coin_type}/{self.address}/objects",
                params={'cursor': cursor, 'limit': self.tx_per_page}
            )
            objects.extend(SpendableObject.from_node(item) for item in res['data'])
            pages += 1
            if not res.get('hasNextPage'):
                break
            cursor = res.get('nextCursor')

        logger.debug(f"Fetched {len(objects)} {coin_type} objects in {pages} page(s)")
        return objects

    async def get_gas_price(self) -> int:
        return await self.cache.get_or_fetch(('gasPrice',), self._fetch_gas_price)

    async def _fetch_gas_price(self) -> int:
        res = await self._request('GET', 'api/v1/gasPrice')
        return int(res['price'])

    async def dry_run_transaction(self, transaction: str) -> Dict:
        """
        Simulate a transaction

        Args:
            transaction: Base64 encoded transaction bytes

        Returns:
            Node dry-run response ({effects: {status, gasUsed}})
        """
        return await self.cache.get_or_fetch(
            ('dryRun', transaction),
            lambda: self._request('POST', 'api/v1/transaction/dryRun', data={'transaction': transaction})
        )

    async def execute_transaction(self, transaction: str, signature: str) -> Dict:
        """
        Submit a signed transaction

        Args:
            transaction: Base64 encoded transaction bytes
            signature: Serialized signature

        Returns:
            Execution response ({digest, effects, balanceChanges})
        """
        res = await self._request(
            'POST',
            'api/v1/transaction/send',
            data={'transaction': transaction, 'signature': signature}
        )
        logger.info(f"✓ Transaction submitted: {res.get('digest')}")
        return res

    async def get_transactions(
        self,
        address: str,
        cursor: Optional[str] = None,
        limit: Optional[int] = None
    ) -> Dict:
        """
        Fetch one history page

        Returns:
            {transactions: [record], hasMore, cursor}
        """
        return await self._request(
            'GET',
            f"api/v1/address/{address}/transactions",
            params={'cursor': cursor, 'limit': limit or self.tx_per_page}
        )

    async def unalias(self, alias: str) -> Dict:
        return await self.cache.get_or_fetch(
            ('unalias', alias),
            lambda: self._request('GET', 'api/v1/unalias', params={'alias': alias})
        )

    async def get_platform_fee_config(self, crypto_id: str) -> PlatformFeeConfig:
        """
        Fetch platform fee settings

        Args:
            crypto_id: Catalogue id of the held crypto

        Returns:
            PlatformFeeConfig (disabled when no platform API is configured)
        """
        if not self.platform_api_url:
            return PlatformFeeConfig(disabled=True)

        url = f"{self.platform_api_url.rstrip('/')}/api/v4/csfee"
        res = await self._request('GET', url, params={'crypto': crypto_id})
        return PlatformFeeConfig.from_api(res)

    def cleanup(self):
        """Invalidate memoized queries"""
        self.cache.invalidate()

    async def aclose(self):
        self.cleanup()
        if self._owns_client:
            await self.client.aclose()
