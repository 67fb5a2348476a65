"""Application settings with Pydantic validation."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


class ModelConfig(BaseSettings):
    """Behavior model configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SOLMIND_MODEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )

    confidence_threshold: float = Field(
        default=0.7, description="Minimum confidence required to trade"
    )
    epochs: int = Field(default=10, description="Training epochs per fit")
    hidden_units: tuple[int, int] = Field(
        default=(64, 32), description="Units in the two hidden layers"
    )
    dropout_rate: float = Field(default=0.2, description="Dropout applied while training")
    batch_size: int = Field(default=32)
    learning_rate: float = Field(default=0.001)
    default_token: str = Field(default="SOL", description="Asset the model trades")
    default_amount: float = Field(default=1.0, description="Default trade size")
    model_path: str | None = Field(default=None, description="Saved model to load on start")

    @field_validator("confidence_threshold", "dropout_rate", mode="before")
    @classmethod
    def validate_fraction(cls, v: float | str) -> float:
        v_float = float(v)
        if not 0.0 <= v_float <= 1.0:
            raise ValueError("Value must be between 0 and 1")
        return v_float

    @field_validator("epochs", "batch_size", mode="before")
    @classmethod
    def validate_positive_int(cls, v: int | str) -> int:
        v_int = int(v)
        if v_int <= 0:
            raise ValueError("Value must be positive")
        return v_int

    @field_validator("learning_rate", "default_amount", mode="before")
    @classmethod
    def validate_positive(cls, v: float | str) -> float:
        v_float = float(v)
        if v_float <= 0:
            raise ValueError("Value must be positive")
        return v_float


class JupiterConfig(BaseSettings):
    """Jupiter swap aggregator configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SOLMIND_JUPITER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_url: str = Field(default="https://quote-api.jup.ag/v6")
    token_list_url: str = Field(default="https://token.jup.ag/all")
    timeout: float = Field(default=30.0)
    only_direct_routes: bool = Field(default=False)
    max_accounts: int = Field(default=5)
    platform_fee_bps: int | None = Field(default=None)
    fee_account: str | None = Field(default=None)
    route_epsilon: float = Field(
        default=0.01, description="Output difference treated as a tie"
    )


class SolanaConfig(BaseSettings):
    """Solana RPC configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SOLMIND_SOLANA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    rpc_url: str = Field(default="https://api.mainnet-beta.solana.com")
    commitment: str = Field(default="confirmed")
    history_limit: int = Field(default=100, description="Signatures fetched per wallet")
    confirmation_timeout: float = Field(default=60.0, description="Seconds to await confirmation")
    poll_interval: float = Field(default=0.5)


class TradingConfig(BaseSettings):
    """Strategy execution configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SOLMIND_TRADING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    wallet_address: str = Field(default="")
    private_key: str = Field(default="", description="Base58 keypair used for signing")
    quote_token: str = Field(default=USDC_MINT, description="Counter asset for trades")
    max_amount: float = Field(default=1.0, description="Max trade size in base asset")
    slippage: float = Field(default=0.01, description="Max slippage (1%)")
    interval: float = Field(default=60.0, description="Seconds between strategy ticks")

    @field_validator("max_amount", "interval", mode="before")
    @classmethod
    def validate_positive(cls, v: float | str) -> float:
        v_float = float(v)
        if v_float <= 0:
            raise ValueError("Value must be positive")
        return v_float

    @field_validator("slippage", mode="before")
    @classmethod
    def validate_slippage(cls, v: float | str) -> float:
        v_float = float(v)
        if not 0.0 < v_float < 1.0:
            raise ValueError("Slippage must be between 0 and 1")
        return v_float


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SOLMIND_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="solmind")
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    model: ModelConfig = Field(default_factory=ModelConfig)
    jupiter: JupiterConfig = Field(default_factory=JupiterConfig)
    solana: SolanaConfig = Field(default_factory=SolanaConfig)
    trading: TradingConfig = Field(default_factory=TradingConfig)


def load_settings() -> Settings:
    """Load settings from environment."""
    return Settings()
