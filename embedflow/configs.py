from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from embedflow.const import DEFAULT_USER_AGENT


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8888
    log_level: str = "INFO"
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Browser
    browser_headless: bool = True
    browser_executable_path: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT
    browser_launch_attempts: int = 2  # Launch attempts per extraction request.
    browser_idle_timeout: float = 300.0  # Seconds without open pages before the browser is closed. 0 disables.

    # Extraction timings, in seconds
    navigation_timeout: float = 60.0
    settle_delay: float = 5.0
    iframe_delay: float = 3.0
    play_click_timeout: float = 2.0
    play_click_wait: float = 2.0
    batch_delay: float = 2.0

    # Per-strategy budgets, in seconds
    direct_strategy_timeout: float = 90.0
    iframe_strategy_timeout: float = 45.0
    dom_strategy_timeout: float = 20.0
    network_strategy_timeout: float = 5.0

    # Additional regex patterns treated as media requests by the interceptor
    extra_media_patterns: List[str] = Field(default_factory=list)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
