"""
Process-wide configuration, read once from the Functions app settings
"""
import os
from functools import lru_cache
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, Field

from brandgraphics.specs.brands import BRAND_PROFILES
from brandgraphics.specs.common.errors import ConfigurationError

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
GRAPH_SCOPE = "https://graph.microsoft.com/.default"


class Settings(BaseModel):
    tenant_id: str = Field(min_length=1)
    client_id: str = Field(min_length=1)
    client_secret: str = Field(min_length=1)
    drive_id: str = Field(min_length=1)
    brand_roots: Dict[str, Optional[str]] = Field(default_factory=dict)
    graph_base_url: str = GRAPH_BASE_URL
    graph_scope: str = GRAPH_SCOPE
    graph_timeout_seconds: float = 30.0
    batch_delay_ms: int = Field(150, ge=0)
    font_path: Optional[str] = None
    font_bold_path: Optional[str] = None

    def brand_root_id(self, brand: str) -> Optional[str]:
        """Root folder item id for a brand; None means resolve it by display name."""
        return self.brand_roots.get(str(brand))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        drive_id = env.get("PRODUCT_IMAGES_DRIVE_ID")
        if not drive_id:
            raise ConfigurationError("Missing PRODUCT_IMAGES_DRIVE_ID in app settings")

        tenant_id = env.get("TENANT_ID")
        client_id = env.get("CLIENT_ID")
        client_secret = env.get("CLIENT_SECRET")
        if not tenant_id or not client_id or not client_secret:
            raise ConfigurationError("Missing TENANT_ID / CLIENT_ID / CLIENT_SECRET in app settings")

        # BRAND_ROOT_<KEY> overrides the known root id; an empty value forces lookup by name
        brand_roots: Dict[str, Optional[str]] = {}
        for brand, profile in BRAND_PROFILES.items():
            override = env.get(f"BRAND_ROOT_{brand.value}")
            if override is None:
                brand_roots[brand.value] = profile.rootItemId
            else:
                brand_roots[brand.value] = override or None

        try:
            return cls(
                tenant_id=tenant_id,
                client_id=client_id,
                client_secret=client_secret,
                drive_id=drive_id,
                brand_roots=brand_roots,
                graph_base_url=env.get("GRAPH_BASE_URL") or GRAPH_BASE_URL,
                graph_timeout_seconds=float(env.get("GRAPH_TIMEOUT_SECONDS") or 30),
                batch_delay_ms=int(env.get("BATCH_DELAY_MS") or 150),
                font_path=env.get("FONT_PATH") or None,
                font_bold_path=env.get("FONT_BOLD_PATH") or None,
            )
        except ValueError as exc:
            raise ConfigurationError(f"Invalid app settings: {exc}") from exc


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Build the Settings once per worker process."""
    return Settings.from_env()
