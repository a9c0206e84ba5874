"""Lead feed access and processed-lead bookkeeping."""

from .service import (
    fetch_leads,
    generate_property_link,
    get_processed_leads,
    parse_message_and_link,
    save_processed_lead,
    time_to_sec,
)

__all__ = [
    'fetch_leads',
    'generate_property_link',
    'get_processed_leads',
    'parse_message_and_link',
    'save_processed_lead',
    'time_to_sec',
]
