"""Supabase connection settings read from the environment (and .env)."""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

load_dotenv()

# Unprefixed names first, then the public-client (Expo) names.
URL_VARS = ("SUPABASE_URL", "EXPO_PUBLIC_SUPABASE_URL")
KEY_VARS = ("SUPABASE_ANON_KEY", "EXPO_PUBLIC_SUPABASE_ANON_KEY")

DEFAULT_SCHEMA = "public"
DEFAULT_TIMEOUT = 30.0


class ConfigError(RuntimeError):
    """Raised when the Supabase URL or key cannot be resolved."""


def _first_set(env: Mapping[str, str], names) -> Optional[str]:
    for name in names:
        value = (env.get(name) or "").strip()
        if value:
            return value
    return None


@dataclass(frozen=True)
class Settings:
    url: str
    key: str
    schema: str = DEFAULT_SCHEMA
    timeout: float = DEFAULT_TIMEOUT

    @property
    def rest_url(self) -> str:
        return f"{self.url}/rest/v1"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env

        url = _first_set(env, URL_VARS)
        if not url:
            raise ConfigError(f"Set {' or '.join(URL_VARS)} in .env or env var")
        key = _first_set(env, KEY_VARS)
        if not key:
            raise ConfigError(f"Set {' or '.join(KEY_VARS)} in .env or env var")

        raw_timeout = env.get("SUPABASE_TIMEOUT")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise ConfigError(f"SUPABASE_TIMEOUT must be a number, got {raw_timeout!r}")

        return cls(
            url=url.rstrip("/"),
            key=key,
            schema=(env.get("SUPABASE_SCHEMA") or DEFAULT_SCHEMA).strip(),
            timeout=timeout,
        )
