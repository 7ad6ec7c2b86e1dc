"""
/**
 * @file config.py
 * @summary Environment-driven settings and logging setup.
 *
 * @details
 * - Loads a local .env file once, then reads every setting from the process
 *   environment.
 * - Missing API keys are allowed here; adapters raise ConfigurationError when
 *   a method that needs the key is called.
 */
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple
from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logging.getLogger(__name__).warning(f"Ignoring non-integer {name}={raw!r}")
        return default


def _env_list(name: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in os.getenv(name, "").split(",") if item.strip())


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning(f"Ignoring non-numeric {name}={raw!r}")
        return default


@dataclass
class Settings:
    """
    /**
     * Process-wide configuration.
     */
    """
    congress_api_key: Optional[str] = None
    fec_api_key: Optional[str] = None
    google_civic_api_key: Optional[str] = None
    news_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    synthesis_model: str = "gpt-4o-mini"
    redis_url: Optional[str] = None
    congress_number: int = 119
    http_timeout: float = 10.0
    http_max_retries: int = 3
    auth_provider: str = "header"
    force_tier: str = "free"
    trusted_proxies: Tuple[str, ...] = ()  # peers allowed to set X-User-* headers
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        /**
         * Build settings from environment variables (after .env loading).
         */
        """
        return cls(
            congress_api_key=os.getenv("CONGRESS_API_KEY") or None,
            fec_api_key=os.getenv("FEC_API_KEY") or None,
            google_civic_api_key=os.getenv("GOOGLE_CIVIC_API_KEY") or None,
            news_api_key=os.getenv("NEWS_API_KEY") or None,
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
            synthesis_model=os.getenv("SYNTHESIS_MODEL", "gpt-4o-mini"),
            redis_url=os.getenv("REDIS_URL") or None,
            congress_number=_env_int("CONGRESS_NUMBER", 119),
            http_timeout=_env_float("HTTP_TIMEOUT", 10.0),
            http_max_retries=_env_int("HTTP_MAX_RETRIES", 3),
            auth_provider=os.getenv("AUTH_PROVIDER", "header").lower(),
            force_tier=os.getenv("FORCE_TIER", "free").lower(),
            trusted_proxies=_env_list("TRUSTED_PROXIES"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


def setup_logging(level: str = "INFO"):
    """
    /**
     * Configure root logging and quiet the HTTP transport loggers.
     */
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # Suppress httpx/httpcore debug logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
