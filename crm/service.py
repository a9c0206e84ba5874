"""
CRM service.

Thin wrappers over Bitrix24 REST methods: lead and contact creation,
external-call telephony, and resolving which user is responsible for a
listing or phone number. Each function takes an optional client; by default
a CRestClient built from bridge_config is created on first use.
"""

import logging
from typing import Any, Dict, Optional

from bridge import CRestClient
from bridge_config import config

logger = logging.getLogger(__name__)

# Listings smart-process fields
REFERENCE_FIELD = 'ufCrm6ReferenceNumber'
AGENT_EMAIL_FIELD = 'ufCrm6AgentEmail'
OWNER_NAME_FIELD = 'ufCrm6ListingOwner'
OWNER_ID_FIELD = 'ufCrm6OwnerId'
PRICE_FIELD = 'ufCrm6Price'

SEARCH_BY_REFERENCE = 'reference'
SEARCH_BY_PHONE = 'phone'

_client: Optional[CRestClient] = None


def get_client() -> CRestClient:
    """Lazily build the shared CRestClient from configuration."""
    global _client
    if _client is None:
        _client = CRestClient()
    return _client


def _result(method: str, params: Dict[str, Any], client: Optional[CRestClient]) -> Any:
    response = (client or get_client()).call(method, params)
    if response.get('error'):
        logger.error(f"❌ {method} failed: {response.get('error')} - {response.get('error_description', '')}")
    return response.get('result')


def create_lead(fields: Dict[str, Any], client: Optional[CRestClient] = None) -> Any:
    """Create a CRM lead; returns the new lead id."""
    return _result('crm.lead.add', {'fields': fields}, client)


def register_call(fields: Dict[str, Any], client: Optional[CRestClient] = None) -> Any:
    return _result('telephony.externalcall.register', fields, client)


def finish_call(fields: Dict[str, Any], client: Optional[CRestClient] = None) -> Any:
    return _result('telephony.externalcall.finish', fields, client)


def attach_record(fields: Dict[str, Any], client: Optional[CRestClient] = None) -> Any:
    return _result('telephony.externalcall.attachRecord', fields, client)


def create_contact(fields: Dict[str, Any], client: Optional[CRestClient] = None) -> Any:
    """Create a CRM contact; returns the new contact id."""
    return _result('crm.contact.add', {'fields': fields}, client)


def _as_int(value: Any) -> Optional[int]:
    """Numeric id ("42", 42, "42.0", 42.0) as int; None for anything else."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def get_user_id(user_filter: Dict[str, Any], client: Optional[CRestClient] = None) -> Optional[int]:
    """Return the id of the first active user matching the filter, or None."""
    response = (client or get_client()).call('user.get', {
        'filter': {**user_filter, 'ACTIVE': 'Y'},
    })

    if response.get('error'):
        logger.error(f"Error getting user: {response.get('error_description', response['error'])}")
        return None

    users = response.get('result')
    if not users or not isinstance(users, list) or not isinstance(users[0], dict):
        return None

    return _as_int(users[0].get('ID'))


def _find_listing(reference: str, select, client: Optional[CRestClient]) -> Dict[str, Any]:
    return (client or get_client()).call('crm.item.list', {
        'entityTypeId': config.crm.listings_entity_type_id,
        'filter': {REFERENCE_FIELD: reference},
        'select': select,
    })


def _listing_items(response: Dict[str, Any]) -> Optional[Any]:
    result = response.get('result')
    return result.get('items') if isinstance(result, dict) else None


def get_responsible_person(search_value: str, search_type: str,
                           client: Optional[CRestClient] = None) -> Optional[int]:
    """Resolve the responsible user for a listing reference or an agent phone number.

    Reference lookups prefer the listing's owner id, then the owner's name,
    then the agent email. Falls back to the default assignee when the
    listing cannot be found or carries no owner details.
    """
    default_user = config.crm.default_assigned_user_id
    excluded = config.crm.excluded_user_id

    if search_type == SEARCH_BY_PHONE:
        return get_user_id({'%PERSONAL_MOBILE': search_value, '!ID': excluded}, client=client)

    if search_type != SEARCH_BY_REFERENCE:
        return default_user

    response = _find_listing(
        search_value,
        [REFERENCE_FIELD, AGENT_EMAIL_FIELD, OWNER_NAME_FIELD, OWNER_ID_FIELD],
        client,
    )
    if response.get('error'):
        logger.error(f"Error getting CRM item: {response.get('error_description', response['error'])}")
        return default_user

    items = _listing_items(response)
    if not items or not isinstance(items, list):
        logger.warning(f"No listing found with reference number: {search_value}")
        return default_user

    listing = items[0]

    owner_id = _as_int(listing.get(OWNER_ID_FIELD))
    if owner_id:
        return owner_id

    owner_name = listing.get(OWNER_NAME_FIELD)
    if owner_name and owner_name.strip():
        name_parts = owner_name.strip().split(' ', 1)
        return get_user_id({
            '%NAME': name_parts[0],
            '%LAST_NAME': name_parts[1] if len(name_parts) > 1 else None,
            '!ID': excluded,
        }, client=client)

    agent_email = listing.get(AGENT_EMAIL_FIELD)
    if agent_email:
        return get_user_id({'EMAIL': agent_email, '!ID': excluded}, client=client)

    logger.warning(f"No agent email found for reference number: {search_value}")
    return default_user


def get_property_price(reference: str, client: Optional[CRestClient] = None) -> Optional[Any]:
    response = _find_listing(reference, [PRICE_FIELD], client)
    items = _listing_items(response)
    if not items or not isinstance(items, list):
        return None
    return items[0].get(PRICE_FIELD)
