# services/publishing-dataset-controller/dataset_controller/config.py
from __future__ import annotations
import os
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Identity
    service_name: str = os.getenv("SERVICE_NAME", "dp-publishing-dataset-controller")
    service_version: str = os.getenv("SERVICE_VERSION", "0.1.0")

    # Server
    bind_addr: str = os.getenv("BIND_ADDR", ":24000")
    graceful_shutdown_timeout_seconds: int = int(os.getenv("GRACEFUL_SHUTDOWN_TIMEOUT", "5"))

    # Upstream services
    dataset_api_url: str = os.getenv("DATASET_API_URL", "http://localhost:22000")
    zebedee_url: str = os.getenv("ZEBEDEE_URL", "http://localhost:8082")
    babbage_url: str = os.getenv("BABBAGE_URL", "http://localhost:8080")

    # Batched listing against the dataset API
    datasets_batch_size: int = int(os.getenv("DATASET_BATCH_SIZE", "100"))
    datasets_batch_workers: int = int(os.getenv("DATASET_BATCH_WORKERS", "10"))

    # HTTP client
    http_client_timeout_seconds: float = float(
        os.getenv("HTTP_CLIENT_TIMEOUT_SECONDS", "30")
    )
    # 1 = no retry; failed upstream calls are surfaced straight to the caller
    http_client_get_attempts: int = int(os.getenv("HTTP_CLIENT_GET_ATTEMPTS", "1"))

    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    def bind_host_port(self) -> tuple[str, int]:
        """
        Split BIND_ADDR (":24000", "0.0.0.0:24000") into host and port.
        An empty host binds every interface.
        """
        host, _, port = self.bind_addr.rpartition(":")
        return (host or "0.0.0.0"), int(port)


settings = Settings()
