"""Runtime configuration.

All settings come from environment variables (set on the hosting platform
or in the shell).  ``Settings.from_env()`` is called once at startup and the
resulting object is handed to every session, so no other module reads the
process environment.
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel

# A credential shorter than this cannot be a real Gemini key.
MIN_API_KEY_LENGTH = 10

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models"


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    supabase_url: str = ""
    supabase_key: str = ""
    catalog_table: str = "cdp_models"
    catalog_label_column: str = "model"
    catalog_backend: str = "supabase"
    catalog_page_size: int = 1000
    catalog_dedupe: bool = True
    match_spec_fields: bool = False

    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_endpoint: str = GEMINI_ENDPOINT
    ai_timeout_seconds: float = 30.0
    session_ttl_seconds: float = 3600.0

    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        return cls(
            supabase_url=env.get("SUPABASE_URL", "").strip(),
            supabase_key=env.get("SUPABASE_ANON_KEY", "").strip(),
            catalog_table=env.get("CATALOG_TABLE", "cdp_models").strip(),
            catalog_label_column=env.get("CATALOG_LABEL_COLUMN", "model").strip(),
            catalog_backend=env.get("CATALOG_BACKEND", "supabase").strip().lower(),
            catalog_page_size=int(env.get("CATALOG_PAGE_SIZE", "1000")),
            catalog_dedupe=_flag(env.get("CATALOG_DEDUPE"), True),
            match_spec_fields=_flag(env.get("MATCH_SPEC_FIELDS"), False),
            gemini_api_key=(env.get("GEMINI_API_KEY") or env.get("API_KEY") or "").strip(),
            gemini_model=env.get("GEMINI_MODEL", "gemini-2.5-flash").strip(),
            ai_timeout_seconds=float(env.get("AI_TIMEOUT_SECONDS", "30")),
            session_ttl_seconds=float(env.get("SESSION_TTL_SECONDS", "3600")),
            log_level=env.get("LOG_LEVEL", "INFO"),
            log_format=env.get("LOG_FORMAT", "json").lower(),
        )

    @property
    def ai_available(self) -> bool:
        """Presence check only; the provider is never called to validate the key."""
        key = self.gemini_api_key
        return bool(key) and key != "undefined" and len(key) > MIN_API_KEY_LENGTH

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)
