"""Application configuration using pydantic-settings.

All values are read once at startup from the environment (and an optional
.env file) and never change afterwards.
"""

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class PipelineConfig:
    """Process-wide constants consumed by the transaction pipeline.

    Attributes:
        wallet_uri: Downstream signer endpoint that receives unsigned txs
        manager_address: Manager contract, the only allowed approval spender
        chain_id: Chain identifier used for every construction call
    """

    wallet_uri: str
    manager_address: str
    chain_id: int = 5


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Wallet / Contracts
    # ======================
    wallet_uri: str = Field(default="", description="Signing wallet endpoint for unsigned txs")
    mngr_contract_addr: str = Field(
        default="", description="Manager contract address (approval spender, swap target)"
    )
    token_contract_addr: str = Field(default="", description="ERC-20 token contract address")
    chain_id: int = Field(default=5, description="Chain ID used for every transaction")
    rpc_url: str = Field(default="", description="JSON-RPC endpoint for balance reads")

    # ======================
    # Credentials
    # ======================
    auth_backend: str = Field(default="local", description="Credential backend: local or remote")
    auth_service_url: str = Field(default="", description="Remote auth service base URL")
    auth_secret: str = Field(default="", description="HMAC secret for locally issued tokens")
    token_ttl_seconds: int = Field(default=3600, description="Lifetime of issued tokens")

    # ======================
    # Transaction construction
    # ======================
    tx_backend: str = Field(default="local", description="Construction backend: local or remote")
    tx_service_url: str = Field(default="", description="Remote construction service base URL")
    http_timeout: float = Field(default=30.0, description="Timeout for downstream HTTP calls")

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=4551, description="API server port")
    api_prefix: str = Field(default="/api/v0", description="Route prefix for token endpoints")
    static_dir: str = Field(default="./public", description="Static files served at /")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug mode")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def pipeline_config(self) -> PipelineConfig:
        """Freeze the pipeline constants."""
        return PipelineConfig(
            wallet_uri=self.wallet_uri,
            manager_address=self.mngr_contract_addr,
            chain_id=self.chain_id,
        )

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "api_prefix": self.api_prefix,
            "chain_id": self.chain_id,
            "wallet_uri": self._redact_url(self.wallet_uri) or "(not set)",
            "manager_contract": self.mngr_contract_addr or "(not set)",
            "token_contract": self.token_contract_addr or "(not set)",
            "rpc_url": self._redact_url(self.rpc_url) or "(not set)",
            "auth": {
                "backend": self.auth_backend,
                "service_url": self.auth_service_url or "(not set)",
                "secret": "***" if self.auth_secret else "(not set)",
                "token_ttl_seconds": self.token_ttl_seconds,
            },
            "construction": {
                "backend": self.tx_backend,
                "service_url": self.tx_service_url or "(not set)",
            },
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact credentials embedded in a URL."""
        if "://" in url and "@" in url:
            proto, rest = url.split("://", 1)
            if "@" in rest:
                creds, host = rest.rsplit("@", 1)
                if ":" in creds:
                    user, _ = creds.split(":", 1)
                    return f"{proto}://{user}:***@{host}"
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
