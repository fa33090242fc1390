"""Domain models for the eth-usdt-wallet facade."""

from pydantic import BaseModel, Field


class WalletInfo(BaseModel):
    """Snapshot of the wallet currently held by the facade.

    Immutable data structure returned from create/import operations.
    Secret fields are excluded from repr so the object is safe to log.
    """

    model_config = {"frozen": True}

    address: str = Field(..., description="Checksummed account address")
    public_key: str = Field(..., description="Uncompressed public key (0x04 + 128 hex chars)")
    private_key: str | None = Field(
        default=None,
        repr=False,
        description="Hex private key with 0x prefix (None after keystore import)",
    )
    mnemonic: str | None = Field(
        default=None,
        repr=False,
        description="BIP-39 phrase the wallet was derived from, if any",
    )

    @property
    def short_address(self) -> str:
        """Return shortened address for display (0x1234...5678)."""
        return f"{self.address[:6]}...{self.address[-4:]}"
