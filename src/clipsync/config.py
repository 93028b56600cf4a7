from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import find_dotenv, load_dotenv

DEFAULT_REMOTE_URL = "http://127.0.0.1:8787/"
DEFAULT_CUSTOMER_ID = "default"


def _load_env(env_path: Optional[Path] = None) -> None:
    # Existing environment variables take precedence over .env values.
    if env_path is not None:
        load_dotenv(env_path, override=False)
    else:
        load_dotenv(find_dotenv(usecwd=True), override=False)


def _env_flag(name: str, default: bool = True) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


def default_home() -> Path:
    return Path.home() / ".clipsync"


@dataclass(frozen=True)
class RedisConfig:
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    decode_responses: bool = True

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "RedisConfig":
        """Read ``REDIS_URI``, falling back to the individual ``REDIS_*`` variables."""
        _load_env(env_path)
        decode = _env_flag("REDIS_DECODE_RESPONSES", default=True)

        uri = os.getenv("REDIS_URI")
        if uri:
            return replace(cls.from_uri(uri), decode_responses=decode)

        return cls(
            host=os.getenv("REDIS_HOST", cls.host),
            port=_env_int("REDIS_PORT", cls.port),
            db=_env_int("REDIS_DB", cls.db),
            password=os.getenv("REDIS_PASSWORD") or None,
            decode_responses=decode,
        )

    @classmethod
    def from_uri(cls, uri: str) -> "RedisConfig":
        parsed = urlparse(uri)
        if parsed.scheme not in ("redis", "rediss"):
            raise ValueError(f"Redis URI must start with redis:// or rediss://, got {uri!r}")

        db_path = parsed.path.strip("/")
        return cls(
            host=parsed.hostname or cls.host,
            port=parsed.port or cls.port,
            db=int(db_path) if db_path else cls.db,
            password=parsed.password or None,
        )


@dataclass(frozen=True)
class MySQLConfig:
    host: str = "127.0.0.1"
    user: str = "root"
    password: str = "admin"
    database: str = "clipsync"
    port: int = 3306

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "MySQLConfig":
        _load_env(env_path)
        return cls(
            host=os.getenv("MYSQL_HOST", cls.host),
            user=os.getenv("MYSQL_USER", cls.user),
            password=os.getenv("MYSQL_PASS", cls.password),
            database=os.getenv("MYSQL_DB", cls.database),
            port=_env_int("MYSQL_PORT", cls.port),
        )


@dataclass(frozen=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8787
    use_redis: bool = True

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "ServerConfig":
        _load_env(env_path)
        return cls(
            host=os.getenv("CLIPSYNC_HOST", cls.host),
            port=_env_int("CLIPSYNC_PORT", cls.port),
            use_redis=_env_flag("CLIPSYNC_USE_REDIS", default=True),
        )


@dataclass(frozen=True)
class ClientConfig:
    remote_url: str = DEFAULT_REMOTE_URL
    timeout: float = 10.0
    home: Path = field(default_factory=default_home)
    user: Optional[str] = None

    @property
    def local_db_path(self) -> Path:
        return self.home / "local.db"

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "ClientConfig":
        _load_env(env_path)
        home_raw = os.getenv("CLIPSYNC_HOME")
        timeout_raw = os.getenv("CLIPSYNC_TIMEOUT")
        return cls(
            remote_url=os.getenv("CLIPSYNC_REMOTE_URL", DEFAULT_REMOTE_URL),
            timeout=float(timeout_raw) if timeout_raw else cls.timeout,
            home=Path(home_raw).expanduser() if home_raw else default_home(),
            user=os.getenv("CLIPSYNC_USER") or None,
        )
