from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict



class Settings(BaseSettings):
    PROJECT_NAME: str = Field(default="payrelay-api")
    ENV: str = Field(default="dev")
    DEBUG: bool = Field(default=False)

    API_PREFIX: str = Field(default="/api")
    LOG_LEVEL: str = Field(default="INFO")
    FRONTEND_URL: list[str] | str = Field(default="http://localhost:3000")  # allow list or comma string
    PUBLIC_BASE_URL: str | None = Field(default=None)
    HTTP_TIMEOUT: float = Field(default=15.0)

    CASHFREE_CLIENT_ID: str | None = Field(default=None)
    CASHFREE_CLIENT_SECRET: str | None = Field(default=None)
    CASHFREE_ENVIRONMENT: str = Field(default="sandbox")
    CASHFREE_API_VERSION: str = Field(default="2023-08-01")
    CASHFREE_RETURN_PATH: str = Field(default="/payment-status?order_id={order_id}")

    PHONEPE_BASE_URL: str = Field(default="https://api-preprod.phonepe.com/apis/pg-sandbox")
    PHONEPE_MERCHANT_ID: str | None = Field(default=None)
    PHONEPE_SALT_KEY: str | None = Field(default=None)
    PHONEPE_SALT_INDEX: int = Field(default=1)
    PHONEPE_REDIRECT_PATH: str = Field(default="/payment-status?txn_id={transaction_id}")

    PAYPAL_CLIENT_ID: str | None = Field(default=None)
    PAYPAL_CLIENT_SECRET: str | None = Field(default=None)
    PAYPAL_MODE: str = Field(default="sandbox")
    PAYPAL_BRAND_NAME: str = Field(default="payrelay")

    SMTP_HOST: str | None = Field(default=None)
    SMTP_PORT: int = Field(default=587)
    SMTP_USERNAME: str | None = Field(default=None)
    SMTP_PASSWORD: str | None = Field(default=None)
    SMTP_USE_TLS: bool = Field(default=True)
    SMTP_FROM: str | None = Field(default=None)

    FIREBASE_PROJECT_ID: str | None = Field(default=None)
    FIREBASE_CLIENT_EMAIL: str | None = Field(default=None)
    FIREBASE_PRIVATE_KEY: str | None = Field(default=None)

    OTEL_EXPORTER_OTLP_ENDPOINT: str | None = Field(default=None)
    OTEL_EXPORTER_OTLP_PROTOCOL: str = Field(default="grpc")
    OTEL_EXPORTER_OTLP_HEADERS: str | None = Field(default=None)
    OTEL_SERVICE_NAME: str | None = Field(default=None)
    OTEL_SAMPLE_RATIO: float | None = Field(default=None)
    OTEL_ENABLED: bool = Field(default=True)

    # Debug logging settings
    DEBUG_LOG_HEADERS: bool = Field(default=True)
    DEBUG_LOG_BODY: bool = Field(default=True)
    DEBUG_MAX_BODY_LENGTH: int = Field(default=10000)
    DEBUG_SENSITIVE_HEADERS: list[str] | str = Field(
        default_factory=lambda: [
            "Authorization",
            "Cookie",
            "x-client-secret",
            "X-VERIFY",
            "x-webhook-signature",
        ]
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        value = self.FRONTEND_URL
        if isinstance(value, list):
            return [origin.rstrip("/") for origin in value if origin]
        if isinstance(value, str):
            # split on commas and strip
            return [p.strip().rstrip("/") for p in value.split(",") if p.strip()]
        return []

    @property
    def frontend_base_url(self) -> str:
        origins = self.cors_origins_list
        return origins[0] if origins else ""

    @property
    def cashfree_mode(self) -> str:
        return "live" if self.CASHFREE_ENVIRONMENT.lower() == "production" else "test"

    @property
    def paypal_mode(self) -> str:
        return "live" if self.PAYPAL_MODE.lower() == "live" else "test"

    @property
    def firebase_private_key(self) -> str | None:
        # Hosting dashboards store the PEM with escaped newlines
        value = self.FIREBASE_PRIVATE_KEY
        if not value:
            return None
        return value.replace("\\n", "\n")

    @property
    def otel_headers_dict(self) -> dict[str, str]:
        value = self.OTEL_EXPORTER_OTLP_HEADERS
        if not value:
            return {}
        headers: dict[str, str] = {}
        parts = value.split(",")
        for part in parts:
            if "=" not in part:
                continue
            key, val = part.split("=", 1)
            key = key.strip()
            val = val.strip()
            if key:
                headers[key] = val
        return headers

    @property
    def debug_sensitive_headers_list(self) -> list[str]:
        value = self.DEBUG_SENSITIVE_HEADERS
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            return [header.strip() for header in value.split(",") if header.strip()]
        return ["Authorization", "Cookie"]

    def integrations_status(self) -> dict[str, bool]:
        return {
            "cashfree": bool(self.CASHFREE_CLIENT_ID and self.CASHFREE_CLIENT_SECRET),
            "phonepe": bool(self.PHONEPE_MERCHANT_ID and self.PHONEPE_SALT_KEY),
            "paypal": bool(self.PAYPAL_CLIENT_ID and self.PAYPAL_CLIENT_SECRET),
            "email": bool(self.SMTP_HOST),
            "firebase": bool(
                self.FIREBASE_PROJECT_ID
                and self.FIREBASE_CLIENT_EMAIL
                and self.firebase_private_key
            ),
        }


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
        # normalize list fields for starlette
        _settings.FRONTEND_URL = _settings.cors_origins_list
        _settings.DEBUG_SENSITIVE_HEADERS = _settings.debug_sensitive_headers_list
    return _settings
