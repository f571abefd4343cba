import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise RuntimeError(f"{name} environment variable must be an integer")


@dataclass(frozen=True)
class Settings:
    secret_key: str
    database_url: str = "sqlite:///./financehub.db"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    bcrypt_rounds: int = 10
    cors_origins: list[str] = field(default_factory=list)
    log_level: str = "INFO"
    log_json: bool = True
    admin_email: str | None = None
    admin_password: str | None = None
    admin_full_name: str = "Admin User"
    seed_system_categories: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        secret_key = os.getenv("SECRET_KEY")
        if not secret_key:
            raise RuntimeError("SECRET_KEY environment variable is not set")

        cors_origins = os.getenv("CORS_ORIGINS", "")
        return cls(
            secret_key=secret_key,
            database_url=os.getenv("DATABASE_URL") or "sqlite:///./financehub.db",
            access_token_expire_minutes=_env_int("ACCESS_TOKEN_EXPIRE_MINUTES", 60),
            bcrypt_rounds=_env_int("BCRYPT_ROUNDS", 10),
            cors_origins=[
                origin.strip() for origin in cors_origins.split(",") if origin.strip()
            ],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_json=_env_bool("LOG_JSON", True),
            admin_email=os.getenv("ADMIN_EMAIL") or None,
            admin_password=os.getenv("ADMIN_PASSWORD") or None,
            admin_full_name=os.getenv("ADMIN_FULL_NAME") or "Admin User",
            seed_system_categories=_env_bool("SEED_SYSTEM_CATEGORIES", True),
        )
