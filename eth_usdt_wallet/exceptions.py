"""Custom exceptions for the eth-usdt-wallet facade.

Only locally detected conditions get their own type. Network, contract
and RPC failures are the underlying SDK's exceptions, raised unmodified.
"""


class WalletError(Exception):
    """Base exception for wallet facade errors."""

    pass


# =============================================================================
# Import Errors (wrap the SDK error, chained with ``from``)
# =============================================================================


class InvalidKeyError(WalletError):
    """Raised when a private key is malformed or out of range."""

    pass


class InvalidMnemonicError(WalletError):
    """Raised when a mnemonic fails BIP-39 validation or derivation."""

    pass


class DecryptionFailedError(WalletError):
    """Raised when a keystore document cannot be decrypted.

    Covers both a wrong password and a corrupt or malformed document.
    """

    pass


# =============================================================================
# Precondition Errors (raised before any I/O)
# =============================================================================


class NoWalletLoadedError(WalletError):
    """Raised when an operation needs a wallet and none is loaded."""

    pass


class NoProviderConnectedError(WalletError):
    """Raised when an operation needs a provider and none is connected."""

    pass


class NoAddressAvailableError(WalletError):
    """Raised when no address was given and no wallet is loaded to default to."""

    pass
