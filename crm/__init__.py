"""One-shot Bitrix24 operations used by the lead bridge."""

from .service import (
    attach_record,
    create_contact,
    create_lead,
    finish_call,
    get_client,
    get_property_price,
    get_responsible_person,
    get_user_id,
    register_call,
)

__all__ = [
    'attach_record',
    'create_contact',
    'create_lead',
    'finish_call',
    'get_client',
    'get_property_price',
    'get_responsible_person',
    'get_user_id',
    'register_call',
]
