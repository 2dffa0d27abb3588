from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Core
    environment: str = Field(default="dev")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    app_name: str = Field(default="FieldServe API")
    tz_default: str = Field(default="America/Vancouver", alias="TZ_DEFAULT")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Uploads
    upload_dir: str = Field(default="uploads", alias="UPLOAD_DIR")
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")  # 5MB

    # Sample data
    seed_sample_data: bool = Field(default=True, alias="SEED_SAMPLE_DATA")

    # Rate limit / metrics
    rate_limit: str = Field(default="100/minute")
    enable_metrics: bool = Field(default=True, alias="ENABLE_METRICS")

    # Dashboard
    weekly_hours_target: int = Field(default=50, alias="WEEKLY_HOURS_TARGET")
    # Not derived from data; shown as-is on the dashboard.
    customer_satisfaction: int = Field(default=92)
    first_time_fix_rate: int = Field(default=87)

    # Reports
    report_company_name: str = Field(default="FieldServe Pro", alias="REPORT_COMPANY_NAME")


settings = Settings()
