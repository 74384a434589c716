"""Configuration management for the blur64 backend."""

from __future__ import annotations

import os
from dataclasses import dataclass

from blur64_shared.protocol import SUPPORTED_FORMATS


def _revalidate_from_env(value: str) -> int | None:
    """A non-positive value disables the cache hint."""
    seconds = int(value)
    return seconds if seconds > 0 else None


@dataclass(frozen=True)
class Config:
    """Backend configuration loaded from environment variables."""

    retries: int = 2
    retry_delay_ms: int = 300
    timeout_ms: int = 30000
    revalidate_seconds: int | None = 3600 * 24
    default_format: str = "avif"
    max_upload_bytes: int = 20 * 1024 * 1024

    @classmethod
    def load(cls) -> Config:
        """Load configuration from environment variables."""
        default_format = os.getenv("BLUR64_DEFAULT_FORMAT", "avif").lower()
        if default_format not in SUPPORTED_FORMATS:
            raise ValueError(f"BLUR64_DEFAULT_FORMAT must be one of {SUPPORTED_FORMATS}")
        return cls(
            retries=int(os.getenv("BLUR64_RETRIES", "2")),
            retry_delay_ms=int(os.getenv("BLUR64_RETRY_DELAY_MS", "300")),
            timeout_ms=int(os.getenv("BLUR64_TIMEOUT_MS", "30000")),
            revalidate_seconds=_revalidate_from_env(os.getenv("BLUR64_REVALIDATE_SECONDS", "86400")),
            default_format=default_format,
            max_upload_bytes=int(os.getenv("BLUR64_MAX_UPLOAD_BYTES", str(20 * 1024 * 1024))),
        )

    def option_defaults(self) -> dict[str, object]:
        """Defaults applied underneath request options."""
        return {
            "format": self.default_format,
            "retries": self.retries,
            "retry_delay": self.retry_delay_ms,
            "timeout": self.timeout_ms,
            "revalidate": self.revalidate_seconds,
        }
