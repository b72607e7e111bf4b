"""Configuration and workspace path management for docmaker."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .generators.remote_render import PDFCO_ENDPOINT

# ---------------------------------------------------------------------------
# Default workspace root
# ---------------------------------------------------------------------------
DEFAULT_ROOT = Path.home() / ".docmaker"

ENV_ROOT = "DOCMAKER_HOME"
ENV_PDFCO_API_KEY = "PDFCO_API_KEY"
ENV_RENDER_ENDPOINT = "DOCMAKER_RENDER_ENDPOINT"
ENV_MIRROR_URL = "DOCMAKER_MIRROR_URL"
ENV_MIRROR_TOKEN = "DOCMAKER_MIRROR_TOKEN"


@dataclass
class DocMakerConfig:
    """Where documents live and which remote services to talk to."""

    root: Path = field(default_factory=lambda: DEFAULT_ROOT)
    pdfco_api_key: str | None = None
    render_endpoint: str = PDFCO_ENDPOINT
    mirror_url: str | None = None
    mirror_token: str | None = None
    timeout: float = 30.0

    @property
    def database_path(self) -> Path:
        return self.root / "documents.db"

    @property
    def exports_dir(self) -> Path:
        return self.root / "exports"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> DocMakerConfig:
        """Build a config from environment variables, keeping defaults for unset ones."""
        env = os.environ if environ is None else environ
        root = env.get(ENV_ROOT)
        return cls(
            root=Path(root).expanduser() if root else DEFAULT_ROOT,
            pdfco_api_key=env.get(ENV_PDFCO_API_KEY) or None,
            render_endpoint=env.get(ENV_RENDER_ENDPOINT) or PDFCO_ENDPOINT,
            mirror_url=env.get(ENV_MIRROR_URL) or None,
            mirror_token=env.get(ENV_MIRROR_TOKEN) or None,
        )

    def ensure_workspace(self) -> None:
        """Create the workspace directories."""
        for d in (self.root, self.exports_dir):
            d.mkdir(parents=True, exist_ok=True)
