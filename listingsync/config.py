from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Runtime ---
    ENV: str = "dev"  # dev|test|prod
    LISTINGS_DB_URL: str = "sqlite+aiosqlite:///./listings.db"

    # --- Minimal auth (API key) ---
    # Send: X-API-Key: <key>
    API_KEY: str | None = None

    # --- Mail source ---
    MAIL_SOURCE: str = "imap"  # imap|eml_dir
    EML_DIR: str = "data/emails"
    MAIL_FETCH_TIMEOUT_S: float = 120.0
    MARK_AS_READ: bool = True

    IMAP_HOST: str = "imap.gmail.com"
    IMAP_PORT: int = 993
    IMAP_USER: str | None = None
    IMAP_PASSWORD: str | None = None
    IMAP_TLS: bool = True
    IMAP_MAILBOX: str = "INBOX"
    IMAP_SENDER_DOMAINS: list[str] = ["zillow.com", "redfin.com", "realtor.com", "land.com"]

    # Optional: custom CA bundle path (corp proxies); default is certifi
    IMAP_CA_BUNDLE: str | None = None

    # --- Scheduler ---
    INGEST_CRON: str = "0 */4 * * *"  # every 4 hours
    RUN_INGEST_ON_STARTUP: bool = False


settings = Settings()
