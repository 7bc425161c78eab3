from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pydantic import field_validator

class Settings(BaseSettings):
    # Database settings (modo online)
    POSTGRES_USER: str = 'pos_user'
    POSTGRES_PASSWORD: str = 'pos_pass'
    POSTGRES_DB: str = 'pos_db'
    POSTGRES_HOST: str = 'postgres'
    POSTGRES_PORT: int = 5432
    DATABASE_URL: Optional[str] = None  # Tiene prioridad sobre POSTGRES_*

    # Modo de base de datos: "online" (PostgreSQL) u "offline" (SQLite local)
    DB_MODE: str = 'online'
    SQLITE_PATH: str = './pos_local.db'

    # Base remota para sincronización (solo aplica en modo offline)
    REMOTE_DATABASE_URL: Optional[str] = None

    # Timeout por sentencia en PostgreSQL (ms)
    STATEMENT_TIMEOUT_MS: int = 15000

    # JWT settings
    APP_SECRET_STRING: str = 'your-super-secret-key-here-change-in-production-2024'
    ALGORITHM: str = 'HS256'
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Reglas de negocio
    TAX_RATE: float = 0.19  # IVA Colombia
    LOW_STOCK_THRESHOLD: int = 5
    BUSINESS_TIMEZONE: str = 'America/Bogota'
    DEFAULT_CURRENCY: str = 'COP'

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def sqlite_url(self) -> str:
        return f"sqlite:///{self.SQLITE_PATH}"

    @property
    def is_offline(self) -> bool:
        return self.DB_MODE == "offline"

    model_config = SettingsConfigDict(
        extra="allow",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("DEBUG", mode="before")
    @classmethod
    def parse_debug(cls, v):
        if isinstance(v, str):
            return v.lower().strip('"').strip("'") in ("true", "1", "yes", "on")
        return bool(v)

    @field_validator("DB_MODE", mode="before")
    @classmethod
    def parse_db_mode(cls, v):
        mode = str(v).lower().strip('"').strip("'")
        if mode not in ("online", "offline"):
            raise ValueError("DB_MODE debe ser 'online' u 'offline'")
        return mode

settings = Settings()
