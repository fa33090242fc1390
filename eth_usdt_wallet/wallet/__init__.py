"""Wallet facade module.

Provides wallet creation/import, balances, transfers and message signing.
"""

from eth_usdt_wallet.wallet.facade import EthereumWallet

__all__ = ["EthereumWallet"]
