import os

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RPC_PORT = "27492"


class ClientConfig(BaseSettings):
    # --- Project Info ---
    APP_NAME: str = "SwapClient"
    ENV: str = "dev"  # dev, prod
    LOG_LEVEL: str = "INFO"

    # --- Broker Connection ---
    RPC_ADDRESS: str = f"localhost:{DEFAULT_RPC_PORT}"
    DISABLE_AUTH: bool = False
    RPC_CERT_PATH: str = "~/.sparkswap/certs/broker-rpc-tls.cert"

    # --- Basic Auth ---
    RPC_USER: str = "sparkswap"
    RPC_PASS: str = "sparkswap"

    # --- Timing ---
    RPC_DEADLINE_SECONDS: float = 5.0
    POLL_INTERVAL_MS: int = 5000

    @field_validator("RPC_ADDRESS")
    @classmethod
    def _default_port(cls, value: str) -> str:
        host, _, port = value.partition(":")
        if not port:
            return f"{host}:{DEFAULT_RPC_PORT}"
        return value

    @property
    def cert_file(self) -> str:
        """Cert path with the user's home directory expanded."""
        return os.path.expanduser(self.RPC_CERT_PATH)

    @property
    def base_url(self) -> str:
        scheme = "http" if self.DISABLE_AUTH else "https"
        return f"{scheme}://{self.RPC_ADDRESS}"

    model_config = SettingsConfigDict(
        env_prefix="SWAPCLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields in .env file
    )
