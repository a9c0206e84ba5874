#!/usr/bin/env python3
"""
Centralized Configuration for the Profolio -> Bitrix24 Lead Bridge
Single source of truth for HTTP timeouts, lead feed, CRM and logging settings.
"""

import os
import logging
from pathlib import Path
from dataclasses import dataclass

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).parent


def _load_env_file(env_file: Path = BASE_DIR / '.env') -> None:
    """Load KEY=VALUE lines from .env without overriding the real environment."""
    if not env_file.exists():
        return
    with open(env_file) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith('#') or '=' not in line:
                continue
            key, value = line.split('=', 1)
            os.environ.setdefault(key.strip(), value.strip())


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in ('true', '1', 'yes', 'on')


@dataclass
class HttpConfig:
    """Outbound HTTP settings for the RequestExecutor."""
    connect_timeout: float = 5.0
    total_timeout: float = 10.0
    log_transport_errors: bool = False


@dataclass
class LeadFeedConfig:
    """Profolio website-client-leads feed."""
    feed_url: str = 'https://dubizzle.com/profolio/api-v7/stats/website-client-leads'
    auth_token: str = ''
    property_link_template: str = 'https://www.bayut.com/property/details-{property_id}.html'


@dataclass
class CrmConfig:
    """Bitrix24 inbound webhook and lookup defaults."""
    webhook_url: str = ''
    listings_entity_type_id: int = 1036
    default_assigned_user_id: int = 1
    # Integration user, never picked as responsible person
    excluded_user_id: int = 8
    # Read once at import by the CRestClient retry decorator
    query_limit_attempts: int = 3


@dataclass
class LoggingConfig:
    logs_dir: str = str(BASE_DIR / 'logs')
    utc_offset_minutes: int = 330  # Asia/Kolkata
    level: str = 'INFO'


class SystemConfig:
    """Main configuration class that aggregates all config sections."""

    def __init__(self):
        _load_env_file()
        self.http = HttpConfig()
        self.lead_feed = LeadFeedConfig()
        self.crm = CrmConfig()
        self.logging = LoggingConfig()

        self._load_environment_overrides()

    def _load_environment_overrides(self):
        """Load configuration overrides from environment variables."""
        if os.getenv('HTTP_CONNECT_TIMEOUT'):
            self.http.connect_timeout = float(os.getenv('HTTP_CONNECT_TIMEOUT'))
        if os.getenv('HTTP_TOTAL_TIMEOUT'):
            self.http.total_timeout = float(os.getenv('HTTP_TOTAL_TIMEOUT'))
        self.http.log_transport_errors = _env_bool('HTTP_LOG_TRANSPORT_ERRORS', self.http.log_transport_errors)

        if os.getenv('PROFOLIO_FEED_URL'):
            self.lead_feed.feed_url = os.getenv('PROFOLIO_FEED_URL')
        self.lead_feed.auth_token = os.getenv('PROFOLIO_AUTH_TOKEN', '')

        self.crm.webhook_url = os.getenv('BITRIX_WEBHOOK_URL', '')
        if os.getenv('DEFAULT_ASSIGNED_USER_ID'):
            self.crm.default_assigned_user_id = int(os.getenv('DEFAULT_ASSIGNED_USER_ID'))
        if os.getenv('BITRIX_QUERY_LIMIT_ATTEMPTS'):
            self.crm.query_limit_attempts = int(os.getenv('BITRIX_QUERY_LIMIT_ATTEMPTS'))

        if os.getenv('LOGS_DIR'):
            self.logging.logs_dir = os.getenv('LOGS_DIR')
        self.logging.level = os.getenv('LOG_LEVEL', self.logging.level).upper()

    def log_config_summary(self):
        """Log current configuration summary."""
        logger.info("🔧 Bridge Configuration:")
        logger.info(f"   Timeouts: connect={self.http.connect_timeout}s total={self.http.total_timeout}s")
        logger.info(f"   Lead feed: {self.lead_feed.feed_url}")
        logger.info(f"   Profolio token: {'SET' if self.lead_feed.auth_token else 'NOT SET'}")
        logger.info(f"   Bitrix webhook: {'SET' if self.crm.webhook_url else 'NOT SET'}")
        logger.info(f"   Default assignee: {self.crm.default_assigned_user_id}")
        logger.info(f"   Logs dir: {self.logging.logs_dir}")


# Global configuration instance
config = SystemConfig()
