"""
Bridge core: the generic HTTP request helper, its error kinds, the dated
log sink and the Bitrix24 webhook client.
"""

from .errors import (
    BridgeError,
    ConfigurationError,
    DecodeError,
    HttpStatusError,
    InvalidInput,
    TransportError,
)
from .models import Err, ExecutorConfig, HttpRequest, HttpResponse, Ok, Timeouts
from .http import RequestExecutor, RequestsTransport, execute
from .log_sink import default_logger, log_data
from .crest import CRestClient

__all__ = [
    'BridgeError',
    'ConfigurationError',
    'DecodeError',
    'HttpStatusError',
    'InvalidInput',
    'TransportError',
    'Err',
    'ExecutorConfig',
    'HttpRequest',
    'HttpResponse',
    'Ok',
    'Timeouts',
    'RequestExecutor',
    'RequestsTransport',
    'execute',
    'default_logger',
    'log_data',
    'CRestClient',
]
