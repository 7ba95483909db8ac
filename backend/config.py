"""Centralized configuration — all env vars in one place."""

import os


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Upstream xkcd API
        self.xkcd_base_url: str = os.getenv("XKCD_BASE_URL", "https://xkcd.com").rstrip("/")
        self.request_timeout: float = float(os.getenv("XKCD_TIMEOUT_SECONDS", "10"))

        # Cache / search tuning
        self.search_concurrency: int = int(os.getenv("SEARCH_CONCURRENCY", "1"))
        max_entries = os.getenv("CACHE_MAX_ENTRIES")
        self.cache_max_entries: int | None = int(max_entries) if max_entries else None

        # Test-only artificial latency on latest-comic cache misses
        self.simulated_latency_ms: int = int(os.getenv("SIMULATED_LATENCY_MS", "0"))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return list of configuration problems (empty when all is well)."""
        problems = []
        if not self.xkcd_base_url.startswith(("http://", "https://")):
            problems.append(f"XKCD_BASE_URL must be an http(s) URL, got {self.xkcd_base_url!r}")
        if self.request_timeout <= 0:
            problems.append("XKCD_TIMEOUT_SECONDS must be positive")
        if self.search_concurrency < 1:
            problems.append("SEARCH_CONCURRENCY must be at least 1")
        if self.cache_max_entries is not None and self.cache_max_entries < 1:
            problems.append("CACHE_MAX_ENTRIES must be at least 1 when set")
        if self.simulated_latency_ms and self.is_production:
            problems.append("SIMULATED_LATENCY_MS is a test hook and should not be set in production")
        return problems


settings = Settings()
