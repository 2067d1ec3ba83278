"""Application configuration"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Esplora (blockstream.info / mempool.space compatible) - BTC balance + transactions
    esplora_base_url: str = "https://blockstream.info/api"

    # Balance sources for the remaining chains
    blockchair_base_url: str = "https://api.blockchair.com"
    xrpscan_base_url: str = "https://api.xrpscan.com/api/v1"
    trongrid_base_url: str = "https://api.trongrid.io/v1"
    ethplorer_base_url: str = "https://api.ethplorer.io"  # ETH fallback when Blockchair fails
    ethplorer_api_key: str = "freekey"

    # Price sources (Binance first, CoinGecko as backup)
    binance_base_url: str = "https://api.binance.com/api/v3"
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"

    # HTTP behaviour
    http_request_timeout: float = 15.0
    http_user_agent: str = "CoinTrace/0.1 (+https://github.com/cointrace)"
    rate_limit_interval: float = 1.0  # Minimum seconds between throttled upstream requests

    # Paginated transaction fetch
    tx_page_size: int = 25  # Esplora returns 25 confirmed txs per page
    tx_page_delay: float = 0.1  # Pause between pages
    tx_max_pages: int = 400  # Safety cap (10k transactions)

    # Bulk classification
    max_bulk_addresses: int = 50

    # Search history
    history_max_entries: int = 50
    history_redis_key: str = "cointrace:history"

    # Redis
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: str = ""

    # Graph layout
    graph_level_spacing: float = 400.0
    graph_vertical_spacing: float = 150.0
    graph_edge_spacing: float = 50.0

    # API
    api_title: str = "CoinTrace API"
    api_version: str = "0.1.0"

    # CORS
    cors_origins: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Logging
    log_level: str = "INFO"


# Global settings instance
settings = Settings()
