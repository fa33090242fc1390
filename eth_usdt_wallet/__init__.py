"""Ethereum wallet with USDT support.

Provides:
- EthereumWallet: facade for wallets, balances, transfers and signing
- WalletInfo: immutable snapshot returned by create/import
- WalletConfig / get_settings: WALLET_-prefixed environment configuration
- setup_logging: loguru handler setup for applications
"""

from eth_usdt_wallet.config import WalletConfig, get_settings
from eth_usdt_wallet.contracts import ERC20_ABI, USDT_CONTRACT_ADDRESS
from eth_usdt_wallet.exceptions import (
    DecryptionFailedError,
    InvalidKeyError,
    InvalidMnemonicError,
    NoAddressAvailableError,
    NoProviderConnectedError,
    NoWalletLoadedError,
    WalletError,
)
from eth_usdt_wallet.log_setup import setup_logging
from eth_usdt_wallet.models import WalletInfo
from eth_usdt_wallet.wallet import EthereumWallet

__all__ = [
    "ERC20_ABI",
    "USDT_CONTRACT_ADDRESS",
    "DecryptionFailedError",
    "EthereumWallet",
    "InvalidKeyError",
    "InvalidMnemonicError",
    "NoAddressAvailableError",
    "NoProviderConnectedError",
    "NoWalletLoadedError",
    "WalletConfig",
    "WalletError",
    "WalletInfo",
    "get_settings",
    "setup_logging",
]
