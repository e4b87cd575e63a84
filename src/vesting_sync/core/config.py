"""Application configuration management using pydantic-settings."""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class ContractTargetConfig:
    """Static description of one monitored contract."""

    name: str
    address: str
    duration: int


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="vesting-sync", description="Application name")
    environment: Literal["development", "testing", "staging", "production"] = Field(
        default="development", description="Runtime environment"
    )
    debug: bool = Field(default=False, description="Debug mode flag")

    # HTTP host
    http_host: str = Field(default="0.0.0.0", description="HTTP listen address")
    http_port: int = Field(default=4000, description="HTTP listen port")
    static_dir: Path = Field(
        default=Path("public"), description="Directory served as static files"
    )

    # Blockchain node
    remote_http: str = Field(
        default="http://localhost:8545",
        description="RPC endpoint of the blockchain node",
    )
    remote_http_backup_urls: list[str] = Field(
        default=[], description="Backup RPC endpoints tried in order"
    )
    poa_chain: bool = Field(
        default=True, description="Inject POA extraData middleware"
    )
    rpc_max_retries: int = Field(default=3, description="Retries per RPC endpoint")
    rpc_retry_delay: float = Field(
        default=1.0, description="Base delay between RPC retries in seconds"
    )

    # Sync inputs
    abi_path: Path = Field(
        default=Path("vesting.json"), description="ABI shared by all contracts"
    )
    checkpoint_path: Path = Field(
        default=Path("public/conf.json"), description="Checkpoint document"
    )
    fetch_pause_seconds: float = Field(
        default=1.0, description="Pause between per-contract log queries"
    )

    # Contracts (declared order is the processing order)
    private_sale_address: str = Field(
        default="0x0000000000000000000000000000000000000000",
        description="Private sale vesting contract address",
    )
    private_sale_duration: int = Field(
        default=0, description="Private sale vesting duration in seconds"
    )
    chain_guardian_address: str = Field(
        default="0x0000000000000000000000000000000000000000",
        description="Chain Guardian vesting contract address",
    )
    chain_guardian_duration: int = Field(
        default=0, description="Chain Guardian vesting duration in seconds"
    )
    trust_pad_address: str = Field(
        default="0x0000000000000000000000000000000000000000",
        description="TrustPad vesting contract address",
    )
    trust_pad_duration: int = Field(
        default=0, description="TrustPad vesting duration in seconds"
    )

    # Database
    db_host: str = Field(default="localhost", description="PostgreSQL host")
    db_port: int = Field(default=5432, description="PostgreSQL port")
    db_user: str = Field(default="postgres", description="PostgreSQL user")
    db_password: str = Field(default="postgres", description="PostgreSQL password")
    db_name: str = Field(default="vesting", description="PostgreSQL database name")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log output format"
    )

    @computed_field
    @property
    def database_url(self) -> str:
        """Construct database URL from components."""
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @computed_field
    @property
    def rpc_urls(self) -> list[str]:
        """Primary RPC endpoint followed by the backups."""
        return [self.remote_http, *self.remote_http_backup_urls]

    @property
    def contract_targets(self) -> list[ContractTargetConfig]:
        """Monitored contracts in processing order."""
        return [
            ContractTargetConfig(
                "private-sale", self.private_sale_address, self.private_sale_duration
            ),
            ContractTargetConfig(
                "chain-guardian",
                self.chain_guardian_address,
                self.chain_guardian_duration,
            ),
            ContractTargetConfig(
                "trust-pad", self.trust_pad_address, self.trust_pad_duration
            ),
        ]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
