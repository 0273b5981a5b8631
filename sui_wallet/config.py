"""
Wallet Configuration

Loads wallet_config.yaml and applies environment overrides (a .env file is
read first when present).

Environment variables:
- SUI_NODE_URL
- SUI_PLATFORM_API_URL
- SUI_TX_PER_PAGE
- SUI_CACHE_TTL_SECONDS
- SUI_DEVELOPMENT
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Optional

import yaml
from dotenv import load_dotenv
from loguru import logger


@dataclass
class WalletConfig:
    """Runtime settings for one wallet"""
    node_url: str = "https://sui.coin.space/"
    platform_api_url: Optional[str] = None
    tx_per_page: int = 10
    request_timeout_seconds: float = 30.0
    cache_ttl_seconds: float = 60.0
    development: bool = False
    storage_path: str = "wallet_storage.json"

    ENV_OVERRIDES = {
        'SUI_NODE_URL': ('node_url', str),
        'SUI_PLATFORM_API_URL': ('platform_api_url', str),
        'SUI_TX_PER_PAGE': ('tx_per_page', int),
        'SUI_CACHE_TTL_SECONDS': ('cache_ttl_seconds', float),
        'SUI_DEVELOPMENT': ('development', lambda value: value.strip().lower() in ('1', 'true', 'yes')),
    }

    @classmethod
    def load(cls, config_path: str = "wallet_config.yaml", use_env: bool = True) -> 'WalletConfig':
        """
        Load configuration

        Args:
            config_path: Path to YAML config
            use_env: Apply .env / environment overrides

        Returns:
            WalletConfig
        """
        values = cls._load_yaml(Path(config_path))

        if use_env:
            load_dotenv()
            for env_name, (field_name, cast) in cls.ENV_OVERRIDES.items():
                raw = os.getenv(env_name)
                if raw is None or raw == '':
                    continue
                try:
                    values[field_name] = cast(raw)
                except ValueError:
                    logger.warning(f"Ignoring invalid {env_name}={raw!r}")

        config = cls(**values)
        logger.info(f"Wallet config loaded (node: {config.node_url}, development: {config.development})")
        return config

    @classmethod
    def _load_yaml(cls, config_path: Path) -> Dict:
        if not config_path.exists():
            logger.warning(f"Config {config_path} not found, using defaults")
            return {}

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error loading config: {e}")
            return {}

        section = data.get('wallet', data) if isinstance(data, dict) else data
        if not isinstance(section, dict):
            logger.warning(f"Config {config_path} has no settings mapping, using defaults")
            return {}

        known = {f.name for f in fields(cls)}
        unknown = set(section) - known
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
        return {key: value for key, value in section.items() if key in known}
