import os

# Basic settings helper to read environment configuration.

DEFAULT_PROFILE_ENDPOINT = "https://sessionserver.mojang.com/session/minecraft/profile"


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_int(name: str, default: int, minimum: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if minimum is not None and value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _as_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


class Settings:
    def __init__(self) -> None:
        self.HOST: str = os.getenv("FACES_HOST", "127.0.0.1")
        self.PORT: int = _as_int("FACES_PORT", 1111, minimum=1)

        self.REQUESTS_PER_MINUTE: int = _as_int("FACES_REQUESTS_PER_MINUTE", 100, minimum=1)
        self.RATE_LIMIT_ENABLED: bool = _as_bool(os.getenv("FACES_RATE_LIMIT_ENABLED"), True)

        self.RAW_CACHE_SIZE: int = _as_int("FACES_RAW_CACHE_SIZE", 512, minimum=1)
        self.ENCODED_CACHE_SIZE: int = _as_int("FACES_ENCODED_CACHE_SIZE", 128, minimum=1)
        self.CACHE_CLEAR_INTERVAL: float = _as_float("FACES_CACHE_CLEAR_INTERVAL", 60.0 * 60 * 24)
        self.CACHE_MAX_AGE: int = _as_int("FACES_CACHE_MAX_AGE", 60 * 60 * 24, minimum=0)

        self.PROFILE_ENDPOINT: str = os.getenv("FACES_PROFILE_ENDPOINT", DEFAULT_PROFILE_ENDPOINT).rstrip("/")
        self.FETCH_TIMEOUT: float = _as_float("FACES_FETCH_TIMEOUT", 10.0)

        self.LOG_LEVEL: str = os.getenv("FACES_LOG_LEVEL", "INFO").upper()


settings = Settings()
