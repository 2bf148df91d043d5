"""Configuration settings for sitecheck."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Run settings loaded from SITECHECK_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SITECHECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Site
    site_root: Path = Path("_site")
    source_root: Path = Path(".")

    # Server
    host: str = "127.0.0.1"
    preferred_port: int = 3000

    # Timeouts (seconds)
    navigation_timeout: float = 10.0
    settle_delay: float = 3.0
    selector_timeout: float = 2.0
    scenario_timeout: float = 15.0
    fetch_timeout: float = 10.0

    # Page shape
    table_selector: str = ".markdown table"

    # Browser
    browser_executable: str | None = None
    headless: bool = True
    viewport_width: int = 1280
    viewport_height: int = 800

    # Baselines
    baseline_path: Path = Path("tests/baselines/table_counts.json")
    update_baselines: bool = False

    # Logging
    log_level: str = "INFO"
    log_json_format: bool = False

    def resolved_site_root(self) -> Path:
        """Site root, relative paths taken from the source root."""
        if self.site_root.is_absolute():
            return self.site_root
        return self.source_root / self.site_root

    def resolved_baseline_path(self) -> Path:
        """Baseline file, relative paths taken from the source root."""
        if self.baseline_path.is_absolute():
            return self.baseline_path
        return self.source_root / self.baseline_path
