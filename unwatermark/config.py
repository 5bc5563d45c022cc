"""Service configuration read from environment variables."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from .document import DEFAULT_DPI


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class ServiceConfig:
    """Settings for the web service and CLI defaults."""

    upload_dir: Path = field(default_factory=lambda: Path("uploads"))
    output_dir: Path = field(default_factory=lambda: Path("outputs"))
    default_threshold: int = 200
    default_tolerance: int = 20
    dpi: int = DEFAULT_DPI
    max_upload_mb: int = 50

    @property
    def max_content_length(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """Build a config from ``UNWATERMARK_*`` environment variables."""
        return cls(
            upload_dir=Path(os.environ.get("UNWATERMARK_UPLOAD_DIR", "uploads")),
            output_dir=Path(os.environ.get("UNWATERMARK_OUTPUT_DIR", "outputs")),
            default_threshold=_env_int("UNWATERMARK_DEFAULT_THRESHOLD", 200),
            default_tolerance=_env_int("UNWATERMARK_DEFAULT_TOLERANCE", 20),
            dpi=_env_int("UNWATERMARK_DPI", DEFAULT_DPI),
            max_upload_mb=_env_int("UNWATERMARK_MAX_UPLOAD_MB", 50),
        )
