from pydantic_settings import BaseSettings, SettingsConfigDict

from clients.wms_backend_sdk.config import SDKConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "WMS-ADMIN"
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    BACKEND_URL: str = "http://localhost:54321/"
    BACKEND_ANON_KEY: str = ""
    BACKEND_SERVICE_ROLE_KEY: str = ""
    BACKEND_TIMEOUT_SECONDS: float = 15.0
    BACKEND_VERIFY_SSL: bool = True
    BACKEND_RETRY_MAX_ATTEMPTS: int = 2
    BACKEND_RETRY_BACKOFF_MS: int = 200

    def sdk_config(self) -> SDKConfig:
        base_url = self.BACKEND_URL.strip()
        return SDKConfig(
            base_url=base_url if base_url.endswith("/") else f"{base_url}/",
            anon_key=self.BACKEND_ANON_KEY,
            service_role_key=self.BACKEND_SERVICE_ROLE_KEY,
            timeout_seconds=self.BACKEND_TIMEOUT_SECONDS,
            verify_ssl=self.BACKEND_VERIFY_SSL,
            retry_max_attempts=max(1, self.BACKEND_RETRY_MAX_ATTEMPTS),
            retry_backoff_ms=max(0, self.BACKEND_RETRY_BACKOFF_MS),
        )


settings = Settings()
