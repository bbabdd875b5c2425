"""Process configuration, read once at startup and passed explicitly to the app and store."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Repo root: from src/contactbook/config.py go up to repo root
_REPO_ROOT = Path(__file__).resolve().parent.parent.parent

DEFAULT_PORT = 5000


@dataclass(frozen=True)
class Settings:
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "password"
    neo4j_database: str | None = None
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    env: str = "development"
    cors_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"

    @property
    def debug(self) -> bool:
        return self.env == "development"


def load_env_file() -> None:
    """Load .env from repo root or current dir. Existing environment variables win."""
    for path in (_REPO_ROOT / ".env", Path.cwd() / ".env"):
        if path.exists():
            load_dotenv(path)
            break


def _get(environ: Mapping[str, str], key: str, default: str) -> str:
    return (environ.get(key) or "").strip() or default


def _parse_port(raw: str) -> int:
    try:
        port = int(raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer, got {raw!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"PORT must be between 1 and 65535, got {port}")
    return port


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from environ (default: os.environ after loading .env)."""
    if environ is None:
        load_env_file()
        environ = os.environ
    origins = tuple(
        o.strip() for o in _get(environ, "CORS_ORIGINS", "*").split(",") if o.strip()
    )
    return Settings(
        neo4j_uri=_get(environ, "NEO4J_URI", Settings.neo4j_uri),
        neo4j_user=_get(environ, "NEO4J_USER", Settings.neo4j_user),
        neo4j_password=_get(environ, "NEO4J_PASSWORD", Settings.neo4j_password),
        neo4j_database=(environ.get("NEO4J_DATABASE") or "").strip() or None,
        host=_get(environ, "HOST", Settings.host),
        port=_parse_port(_get(environ, "PORT", str(DEFAULT_PORT))),
        env=_get(environ, "APP_ENV", _get(environ, "NODE_ENV", Settings.env)),
        cors_origins=origins or ("*",),
        log_level=_get(environ, "LOG_LEVEL", Settings.log_level).upper(),
    )
