"""
Lead service.

Pulls website-client leads from the Profolio stats API and keeps the small
amount of local state the sync needs (which lead ids were already pushed to
the CRM). Feed failures are logged and turned into None here; the request
helper itself always raises.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlencode

from bridge import BridgeError, execute
from bridge_config import config

logger = logging.getLogger(__name__)

LINK_PATTERN = re.compile(r'Link:\s(https?://\S+)')


def fetch_leads(lead_type: str, timestamp: str, auth_token: Optional[str] = None,
                platform: str = 'bayut') -> Optional[Any]:
    """Fetch leads of one type created since timestamp.

    Returns the decoded feed payload, or None when the feed is empty or the
    call failed.
    """
    token = auth_token or config.lead_feed.auth_token
    url = f"{config.lead_feed.feed_url}?{urlencode({'type': lead_type, 'timestamp': timestamp})}"

    try:
        data = execute(url, [
            'Content-Type: application/json',
            f'Authorization: Bearer {token}',
        ])
    except BridgeError as e:
        logger.error(f"❌ Failed to fetch {platform} {lead_type} leads: {e}")
        return None

    if not data:
        logger.info(f"No new {platform} {lead_type} leads since {timestamp}")
        return None

    logger.info(f"📥 Fetched {platform} {lead_type} leads since {timestamp}")
    return data


def generate_property_link(property_id: Union[int, str]) -> str:
    return config.lead_feed.property_link_template.format(property_id=property_id)


def get_processed_leads(path: Union[str, Path]) -> List[str]:
    """Lead ids already pushed to the CRM, one per line; [] if the file is missing."""
    path = Path(path)
    if not path.exists():
        return []
    with open(path, 'r', encoding='utf-8') as f:
        return [line.rstrip('\r\n') for line in f if line.strip()]


def save_processed_lead(path: Union[str, Path], lead_id: Union[int, str]) -> None:
    with open(path, 'a', encoding='utf-8') as f:
        f.write(f"{lead_id}\n")


def time_to_sec(value: str) -> int:
    """Convert "HH:MM:SS" to seconds."""
    parts = value.split(':')
    if len(parts) != 3:
        raise ValueError(f"Expected HH:MM:SS, got {value!r}")
    hours, minutes, seconds = (int(p) for p in parts)
    return hours * 3600 + minutes * 60 + seconds


def parse_message_and_link(text: str) -> Dict[str, Optional[str]]:
    """Split a lead message of the form "<message> Link: <url>"."""
    match = LINK_PATTERN.search(text)
    return {
        'message': text.split('Link:', 1)[0].strip(),
        'link': match.group(1) if match else None,
    }
