"""Ethereum wallet facade with USDT support.

Wraps eth-account (keys, signing, keystores), the mnemonic package
(BIP-39 phrases) and web3 (JSON-RPC) behind one stateful object that
holds at most one wallet and at most one provider connection.
"""

import asyncio
import json
from typing import Any

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from eth_keys import keys
from loguru import logger
from mnemonic import Mnemonic
from web3 import AsyncWeb3
from web3.providers import AsyncHTTPProvider

from eth_usdt_wallet.config import WalletConfig, get_settings
from eth_usdt_wallet.contracts import ERC20_ABI
from eth_usdt_wallet.exceptions import (
    DecryptionFailedError,
    InvalidKeyError,
    InvalidMnemonicError,
    NoAddressAvailableError,
    NoProviderConnectedError,
    NoWalletLoadedError,
)
from eth_usdt_wallet.models import WalletInfo
from eth_usdt_wallet.units import format_ether, format_units, parse_ether, parse_units

# Required for Account.from_mnemonic
Account.enable_unaudited_hdwallet_features()


class EthereumWallet:
    """Ethereum wallet creator with USDT support.

    Holds a single active wallet and a single provider. Creating or
    importing a wallet replaces the previous one; connecting a provider
    replaces the previous connection. The wallet is bound to the provider
    whenever both are present, and only a bound wallet can send.

    Features:
    - Wallet creation from a fresh 12-word BIP-39 mnemonic
    - Import from private key, mnemonic or encrypted keystore JSON
    - ETH and USDT balances, with USDT decimals read from the contract
    - ETH and USDT transfers, signed locally and serialized per instance
    - EIP-191 personal message signing and signer recovery
    - No retries, no caching: every network error reaches the caller as-is

    Usage:
        wallet = EthereumWallet()
        info = wallet.create_new_wallet()
        wallet.connect_provider("https://eth.llamarpc.com")

        eth = await wallet.get_eth_balance()
        usdt = await wallet.get_usdt_balance()

        receipt = await wallet.send_usdt("0xRecipient...", "12.5")
    """

    # BIP-44 path for the first Ethereum account
    DEFAULT_DERIVATION_PATH = "m/44'/60'/0'/0/0"
    # 128 bits of entropy = 12 words
    MNEMONIC_STRENGTH = 128
    MNEMONIC_LANGUAGE = "english"

    def __init__(self, config: WalletConfig | None = None) -> None:
        """Initialize the facade with no wallet and no provider.

        Args:
            config: Wallet configuration. Defaults to the global settings.
        """
        self._config = config or get_settings()
        self._mnemo = Mnemonic(self.MNEMONIC_LANGUAGE)
        self._account: LocalAccount | None = None
        self._info: WalletInfo | None = None
        self._w3: AsyncWeb3 | None = None
        self._send_lock = asyncio.Lock()

    # =========================================================================
    # State
    # =========================================================================

    @property
    def wallet_info(self) -> WalletInfo | None:
        """Info returned by the most recent successful create/import."""
        return self._info

    @property
    def is_connected(self) -> bool:
        """Whether a provider has been connected."""
        return self._w3 is not None

    @property
    def token_address(self) -> str:
        """Checksummed address of the USDT contract."""
        return AsyncWeb3.to_checksum_address(self._config.token_address)

    def get_address(self) -> str | None:
        """Get current wallet address, or None if no wallet is loaded."""
        return self._account.address if self._account else None

    # =========================================================================
    # Wallet creation and import
    # =========================================================================

    def create_new_wallet(self) -> WalletInfo:
        """Generate a new random wallet from a fresh 12-word mnemonic.

        Returns:
            WalletInfo including private key and mnemonic.
        """
        phrase = self._mnemo.generate(strength=self.MNEMONIC_STRENGTH)
        account = Account.from_mnemonic(phrase, account_path=self.DEFAULT_DERIVATION_PATH)

        info = self._load(account, mnemonic=phrase)
        logger.info("Created new wallet: {}", info.short_address)
        return info

    def import_from_private_key(self, private_key: str) -> WalletInfo:
        """Import wallet from a raw private key.

        Args:
            private_key: Hex private key (with or without 0x prefix).

        Returns:
            WalletInfo without a mnemonic.

        Raises:
            InvalidKeyError: If the key is not 32 bytes of hex or not a
                valid secp256k1 secret. The loaded wallet is unchanged.
        """
        if not isinstance(private_key, str):
            raise InvalidKeyError(
                f"Invalid private key: expected hex string, got {type(private_key).__name__}"
            )

        # Normalize key - lowercase 0x prefix, added if missing
        key = private_key.strip()
        if key[:2].lower() == "0x":
            key = key[2:]
        key = f"0x{key}"

        # Validate key format (should be 0x + 64 hex chars)
        if len(key) != 66:
            raise InvalidKeyError(
                f"Invalid private key: expected 64 hex characters (got {len(key) - 2})"
            )

        try:
            int(key, 16)
        except ValueError as e:
            raise InvalidKeyError("Invalid private key: not valid hexadecimal") from e

        try:
            account: LocalAccount = Account.from_key(key)
        except Exception as e:
            logger.warning("Private key import rejected: {}", type(e).__name__)
            raise InvalidKeyError(f"Invalid private key: {e}") from e

        info = self._load(account)
        logger.info("Imported wallet from private key: {}", info.short_address)
        return info

    def import_from_mnemonic(self, mnemonic: str) -> WalletInfo:
        """Import wallet from a BIP-39 mnemonic phrase (12 to 24 words).

        Args:
            mnemonic: Space separated mnemonic phrase.

        Returns:
            WalletInfo including the normalized mnemonic.

        Raises:
            InvalidMnemonicError: If the checksum is invalid or derivation
                fails. The loaded wallet is unchanged.
        """
        if not isinstance(mnemonic, str):
            raise InvalidMnemonicError("Invalid mnemonic: expected a string")

        phrase = " ".join(mnemonic.split())

        if not self._mnemo.check(phrase):
            logger.warning("Mnemonic import rejected: checksum validation failed")
            raise InvalidMnemonicError("Invalid mnemonic: Invalid mnemonic phrase")

        try:
            account = Account.from_mnemonic(phrase, account_path=self.DEFAULT_DERIVATION_PATH)
        except Exception as e:
            logger.warning("Mnemonic import rejected: {}", type(e).__name__)
            raise InvalidMnemonicError(f"Invalid mnemonic: {e}") from e

        info = self._load(account, mnemonic=phrase)
        logger.info("Imported wallet from mnemonic: {}", info.short_address)
        return info

    async def import_from_json(self, keystore: str | dict[str, Any], password: str) -> WalletInfo:
        """Import wallet from an encrypted keystore document.

        Key derivation runs in a worker thread.

        Args:
            keystore: Web3 Secret Storage document, as JSON text or dict.
            password: Password to decrypt.

        Returns:
            WalletInfo with address and public key only.

        Raises:
            DecryptionFailedError: On wrong password or corrupt document.
        """
        try:
            private_key = await asyncio.to_thread(Account.decrypt, keystore, password)
            account: LocalAccount = Account.from_key(private_key)
        except Exception as e:
            logger.warning("Keystore import failed: {}", type(e).__name__)
            raise DecryptionFailedError(f"Failed to decrypt wallet: {e}") from e

        self._load(account)
        info = WalletInfo(address=account.address, public_key=self._public_key(account))
        self._info = info

        if self._w3 is not None:
            logger.info("Bound wallet {} to connected provider", info.short_address)

        logger.info("Imported wallet from keystore: {}", info.short_address)
        return info

    async def export_wallet(self, password: str) -> str:
        """Export wallet as an encrypted keystore JSON document.

        Args:
            password: Password to encrypt the keystore.

        Returns:
            Web3 Secret Storage document as JSON text.

        Raises:
            NoWalletLoadedError: If no wallet is loaded.
        """
        account = self._require_wallet()

        keystore = await asyncio.to_thread(
            account.encrypt,
            password,
            kdf=self._config.keystore_kdf,
            iterations=self._config.keystore_iterations,
        )

        logger.info("Exported keystore for {}", self._short(account.address))
        return json.dumps(keystore)

    # =========================================================================
    # Provider
    # =========================================================================

    def connect_provider(self, rpc_url: str | None = None, w3: AsyncWeb3 | None = None) -> None:
        """Connect to an Ethereum JSON-RPC provider.

        Reachability is not checked here; connection errors surface on the
        first network call. If a wallet is loaded it becomes bound to the
        new provider.

        Args:
            rpc_url: RPC URL (e.g. Infura, Alchemy). Defaults to the
                configured public endpoint.
            w3: Pre-built AsyncWeb3 instance to use instead of rpc_url.
        """
        if w3 is None:
            rpc_url = rpc_url or self._config.rpc_url
            w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
            logger.info("Connected provider: {}", rpc_url)
        else:
            logger.info("Connected provider: {}", type(w3).__name__)

        self._w3 = w3

        if self._account is not None:
            logger.info("Bound wallet {} to provider", self._short(self._account.address))

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_eth_balance(self, address: str | None = None) -> str:
        """Get ETH balance.

        Args:
            address: Ethereum address. Defaults to the loaded wallet.

        Returns:
            Balance in ETH as a decimal string (e.g. "1.5").
        """
        w3 = self._require_provider()
        target = self._resolve_address(address)

        balance = await w3.eth.get_balance(target)
        logger.debug("ETH balance of {}: {} wei", self._short(target), balance)
        return format_ether(balance)

    async def get_usdt_balance(self, address: str | None = None) -> str:
        """Get USDT balance, scaled by the contract's decimals().

        Args:
            address: Ethereum address. Defaults to the loaded wallet.

        Returns:
            Balance in USDT as a decimal string.
        """
        w3 = self._require_provider()
        target = self._resolve_address(address)

        contract = self._token_contract(w3)
        balance = await contract.functions.balanceOf(target).call()
        decimals = await contract.functions.decimals().call()

        logger.debug("USDT balance of {}: {} base units", self._short(target), balance)
        return format_units(balance, decimals)

    async def get_transaction_history(
        self,
        address: str | None = None,
        start_block: int = 0,
        end_block: int | str = "latest",
    ) -> list[dict[str, Any]]:
        """Get event logs emitted by an address over a block range.

        This filters eth_getLogs by emitting address, so it returns logs
        of a contract rather than the transactions of an account. For a
        full account history use an indexer such as Etherscan.

        Args:
            address: Address to filter logs by. Defaults to the loaded wallet.
            start_block: First block of the range.
            end_block: Last block of the range, or "latest".

        Returns:
            Raw log entries as dicts.
        """
        w3 = self._require_provider()
        target = self._resolve_address(address)

        if end_block == "latest":
            end_block = await w3.eth.block_number

        logs = await w3.eth.get_logs(
            {"fromBlock": start_block, "toBlock": end_block, "address": target}
        )

        logger.debug(
            "Fetched {} logs for {} in blocks {}-{}",
            len(logs),
            self._short(target),
            start_block,
            end_block,
        )
        return [dict(log) for log in logs]

    # =========================================================================
    # Transfers
    # =========================================================================

    async def send_eth(self, to_address: str, amount: str) -> dict[str, Any]:
        """Send ETH and wait for it to be mined.

        Args:
            to_address: Recipient address.
            amount: Amount in ETH as a decimal string.

        Returns:
            Transaction receipt as a dict.

        Raises:
            NoWalletLoadedError: If no wallet is loaded.
            NoProviderConnectedError: If no provider is connected.
        """
        account, w3 = self._require_bound()
        to = AsyncWeb3.to_checksum_address(to_address)
        value = parse_ether(amount)

        async with self._send_lock:
            tx = await self._base_transaction(w3, account.address)
            tx["to"] = to
            tx["value"] = value
            tx["gas"] = await w3.eth.estimate_gas(tx)

            logger.info("Sending {} ETH to {}", amount, self._short(to))
            return await self._sign_and_send(w3, account, tx)

    async def send_usdt(self, to_address: str, amount: str) -> dict[str, Any]:
        """Send USDT and wait for it to be mined.

        Args:
            to_address: Recipient address.
            amount: Amount in USDT as a decimal string.

        Returns:
            Transaction receipt as a dict.

        Raises:
            NoWalletLoadedError: If no wallet is loaded.
            NoProviderConnectedError: If no provider is connected.
        """
        account, w3 = self._require_bound()
        to = AsyncWeb3.to_checksum_address(to_address)
        contract = self._token_contract(w3)

        async with self._send_lock:
            decimals = await contract.functions.decimals().call()
            units = parse_units(amount, decimals)

            base = await self._base_transaction(w3, account.address)
            tx = await contract.functions.transfer(to, units).build_transaction(base)

            logger.info("Sending {} USDT to {}", amount, self._short(to))
            return await self._sign_and_send(w3, account, tx)

    # =========================================================================
    # Messages
    # =========================================================================

    def sign_message(self, message: str) -> str:
        """Sign a message with the EIP-191 personal message scheme.

        Args:
            message: Message to sign.

        Returns:
            0x-prefixed 65-byte signature.
        """
        account = self._require_wallet()
        signed = account.sign_message(encode_defunct(text=message))
        return AsyncWeb3.to_hex(signed.signature)

    @staticmethod
    def verify_message(message: str, signature: str) -> str:
        """Recover the signer address of a personal message signature.

        Args:
            message: Original message.
            signature: Signature to verify.

        Returns:
            Checksummed signer address.
        """
        return Account.recover_message(encode_defunct(text=message), signature=signature)

    # =========================================================================
    # Internals
    # =========================================================================

    def _load(self, account: LocalAccount, mnemonic: str | None = None) -> WalletInfo:
        """Replace the active wallet and return its info."""
        info = WalletInfo(
            address=account.address,
            public_key=self._public_key(account),
            private_key=AsyncWeb3.to_hex(account.key),
            mnemonic=mnemonic,
        )
        self._account = account
        self._info = info
        return info

    @staticmethod
    def _public_key(account: LocalAccount) -> str:
        """Uncompressed SEC1 public key (0x04 prefix + X + Y)."""
        public_key = keys.PrivateKey(account.key).public_key
        return "0x04" + public_key.to_bytes().hex()

    @staticmethod
    def _short(address: str) -> str:
        return f"{address[:6]}...{address[-4:]}"

    def _require_wallet(self) -> LocalAccount:
        if self._account is None:
            raise NoWalletLoadedError("No wallet loaded")
        return self._account

    def _require_provider(self) -> AsyncWeb3:
        if self._w3 is None:
            raise NoProviderConnectedError("Provider not connected. Call connect_provider() first.")
        return self._w3

    def _require_bound(self) -> tuple[LocalAccount, AsyncWeb3]:
        account = self._require_wallet()
        if self._w3 is None:
            raise NoProviderConnectedError("Provider not connected")
        return account, self._w3

    def _resolve_address(self, address: str | None) -> str:
        target = address or self.get_address()
        if not target:
            raise NoAddressAvailableError("No address provided and no wallet loaded")
        return AsyncWeb3.to_checksum_address(target)

    def _token_contract(self, w3: AsyncWeb3) -> Any:
        return w3.eth.contract(address=self.token_address, abi=ERC20_ABI)

    async def _base_transaction(self, w3: AsyncWeb3, sender: str) -> dict[str, Any]:
        """EIP-1559 fields shared by every transfer.

        maxFeePerGas allows the base fee to double before the transaction
        stops being includable.
        """
        latest_block = await w3.eth.get_block("latest")
        base_fee = latest_block.get("baseFeePerGas", 0)
        max_priority_fee = await w3.eth.max_priority_fee

        return {
            "from": sender,
            "chainId": await w3.eth.chain_id,
            "nonce": await w3.eth.get_transaction_count(sender, "pending"),
            "maxPriorityFeePerGas": max_priority_fee,
            "maxFeePerGas": 2 * base_fee + max_priority_fee,
        }

    async def _sign_and_send(
        self, w3: AsyncWeb3, account: LocalAccount, tx: dict[str, Any]
    ) -> dict[str, Any]:
        signed = account.sign_transaction(tx)
        tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)
        logger.info("Broadcast transaction {}", AsyncWeb3.to_hex(tx_hash))

        receipt = await w3.eth.wait_for_transaction_receipt(
            tx_hash,
            timeout=self._config.receipt_timeout,
            poll_latency=self._config.receipt_poll_latency,
        )

        if receipt.get("status") == 0:
            logger.warning(
                "Transaction {} reverted in block {}",
                AsyncWeb3.to_hex(tx_hash),
                receipt.get("blockNumber"),
            )
        else:
            logger.info(
                "Transaction {} confirmed in block {}",
                AsyncWeb3.to_hex(tx_hash),
                receipt.get("blockNumber"),
            )

        return dict(receipt)
