from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str
    database_url_direct: str | None = None

    # Seeding
    seed_data_dir: str = "seed/data"
    log_level: str = "INFO"

    # App
    app_name: str = "TeaLedger"
    version: str = "1.0.0"
    debug: bool = False


settings = Settings()
