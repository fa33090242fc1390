"""Configuration architecture using pydantic-settings for typed environment loading."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from eth_usdt_wallet.contracts import USDT_CONTRACT_ADDRESS

DEFAULT_RPC_URL = "https://eth.llamarpc.com"


class WalletConfig(BaseSettings):
    """Wallet facade configuration.

    Every field can be overridden with a WALLET_-prefixed environment
    variable (e.g. WALLET_RPC_URL) or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="WALLET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Used only when connect_provider() is called without a URL
    rpc_url: str = DEFAULT_RPC_URL
    token_address: str = USDT_CONTRACT_ADDRESS

    # Receipt polling after a broadcast
    receipt_timeout: float = 120.0
    receipt_poll_latency: float = 0.5

    # Web3 Secret Storage key derivation for export_wallet()
    keystore_kdf: Literal["scrypt", "pbkdf2"] = "scrypt"
    keystore_iterations: int | None = None

    log_level: str = "INFO"


# Global settings instance - lazily loaded
_settings: WalletConfig | None = None


def get_settings() -> WalletConfig:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = WalletConfig()
    return _settings
