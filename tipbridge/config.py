import os

from decimal import Decimal
from pathlib import Path
from typing import Any, Dict

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Pick up the frontend-era environment variable names."""

        super().model_post_init(__context)

        if not self.lifi_api_key:
            fallback = os.getenv("NEXT_PUBLIC_LIFI_API_KEY")
            if fallback:
                object.__setattr__(self, "lifi_api_key", fallback)

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="auto",
        description="Log rendering: json, console, or auto (console at DEBUG, json otherwise)",
    )

    # Aggregator (LI.FI)
    lifi_base_url: str = Field(default="https://li.quest/v1", description="LI.FI API base URL")
    lifi_api_key: str = Field(default="", description="Optional LI.FI API key")
    lifi_integrator: str = Field(
        default="only-tokens-tips",
        description="Integrator name attributed on every quote",
        validation_alias=AliasChoices("lifi_integrator", "NEXT_PUBLIC_LIFI_INTEGRATOR"),
    )
    integrator_fee: Decimal = Field(default=Decimal("0.01"), description="Integrator fee as a fraction (0.01 = 1%)")
    default_slippage: Decimal = Field(default=Decimal("0.005"), description="Default slippage tolerance as a fraction")
    quote_timeout_seconds: int = Field(default=20, description="Timeout for quote requests")

    # Settlement policy
    settlement_chain_id: int = Field(default=8453, description="Chain the recipient is paid out on (Base)")
    settlement_token: str = Field(
        default="0x0000000000000000000000000000000000000000",
        description="Asset the recipient receives on the settlement chain",
    )

    # Backend ledger / auth
    backend_api_url: str = Field(
        default="https://localhost:8080",
        description="Backend base URL for wallet login and tip records",
        validation_alias=AliasChoices("backend_api_url", "NEXT_PUBLIC_API_URL"),
    )
    backend_timeout_seconds: int = Field(default=10, description="Timeout for backend calls")
    session_lifetime_hours: int = Field(default=48, description="Lifetime of a wallet session token")
    session_refresh_margin_seconds: int = Field(
        default=300,
        description="Refresh a cached session this many seconds before it expires",
    )

    # EVM
    alchemy_api_key: str = Field(default="", description="Alchemy API key used to build EVM RPC URLs")
    evm_rpc_urls: Dict[int, str] = Field(
        default_factory=dict,
        description="Explicit RPC URL per EVM chain id; overrides the Alchemy defaults",
    )
    approval_receipt_timeout_seconds: int = Field(default=180, description="Max wait for an approval receipt")
    tx_receipt_timeout_seconds: int = Field(default=300, description="Max wait for a tip transaction receipt")
    receipt_poll_interval_seconds: float = Field(default=2.0, description="Receipt polling interval")

    # Solana
    solana_rpc_url: str = Field(default="", description="Solana RPC URL")
    solana_commitment: str = Field(default="confirmed", description="Commitment level for submit/confirm")
    solana_confirmation_timeout_seconds: int = Field(default=60, description="Max wait for a Solana confirmation")

    # Sui
    sui_network: str = Field(default="sui:mainnet", description="Wallet-standard chain name for Sui")
    sui_settlement_address: str = Field(
        default="",
        description="Fixed Sui address that receives Sui tips",
    )

    # Streamer receiving tips through this deployment
    streamer_id: str = Field(default="", description="Username of the streamer receiving tips")

    @property
    def has_lifi_key(self) -> bool:
        return bool(self.lifi_api_key)

    @property
    def has_alchemy_key(self) -> bool:
        return bool(self.alchemy_api_key)

    def resolve_evm_rpc_url(self, chain_id: int) -> str:
        explicit = self.evm_rpc_urls.get(chain_id)
        if explicit:
            return explicit
        slug = _ALCHEMY_SLUGS.get(chain_id)
        if slug and self.alchemy_api_key:
            return f"https://{slug}.g.alchemy.com/v2/{self.alchemy_api_key}"
        return _PUBLIC_EVM_RPC.get(chain_id, "")

    def resolve_solana_rpc_url(self) -> str:
        if self.solana_rpc_url:
            return self.solana_rpc_url
        if self.alchemy_api_key:
            return f"https://solana-mainnet.g.alchemy.com/v2/{self.alchemy_api_key}"
        # Public RPC, rate limited
        return "https://api.mainnet-beta.solana.com"


_ALCHEMY_SLUGS: Dict[int, str] = {
    1: "eth-mainnet",
    10: "opt-mainnet",
    137: "polygon-mainnet",
    8453: "base-mainnet",
    42161: "arb-mainnet",
}

_PUBLIC_EVM_RPC: Dict[int, str] = {
    1: "https://eth.llamarpc.com",
    10: "https://mainnet.optimism.io",
    137: "https://polygon-rpc.com",
    8453: "https://mainnet.base.org",
    42161: "https://arb1.arbitrum.io/rpc",
}


# Global settings instance
settings = Settings()
