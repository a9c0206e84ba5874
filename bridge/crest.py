"""
Bitrix24 inbound-webhook client, CRest-style.

call(method, params) posts form-encoded params to <webhook>/<method>.json and
returns the decoded response: {'result': ...} on success or
{'error': ..., 'error_description': ...} on failure. It never raises for
remote failures; callers inspect 'error'.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

from tenacity import retry, retry_if_result, stop_after_attempt, wait_exponential

from bridge_config import config

from .errors import ConfigurationError, HttpStatusError
from .http import RequestExecutor
from .models import Err, HttpRequest

logger = logging.getLogger(__name__)

QUERY_LIMIT_EXCEEDED = 'QUERY_LIMIT_EXCEEDED'

FORM_HEADERS = [
    'Content-Type: application/x-www-form-urlencoded',
    'Accept: application/json',
]


def _flatten(prefix: str, value: Any, out: List[Tuple[str, str]]) -> None:
    if isinstance(value, dict):
        items = value.items()
    elif isinstance(value, (list, tuple)):
        items = enumerate(value)
    else:
        if value is None:
            return
        if isinstance(value, bool):
            value = int(value)
        out.append((prefix, str(value)))
        return
    for key, item in items:
        _flatten(f"{prefix}[{key}]" if prefix else str(key), item, out)


def build_query(params: Optional[Dict[str, Any]]) -> str:
    """Form-encode nested params with bracket keys (fields[TITLE]=..., select[0]=...)."""
    pairs: List[Tuple[str, str]] = []
    _flatten('', params or {}, pairs)
    return urlencode(pairs)


def _is_query_limit_exceeded(response: Dict[str, Any]) -> bool:
    return isinstance(response, dict) and response.get('error') == QUERY_LIMIT_EXCEEDED


def _last_response(retry_state):
    logger.warning(f"⚠️ Bitrix query limit still exceeded after {retry_state.attempt_number} attempts")
    return retry_state.outcome.result()


class CRestClient:
    """Minimal Bitrix24 REST client over the RequestExecutor."""

    def __init__(self, webhook_url: Optional[str] = None, executor: Optional[RequestExecutor] = None):
        webhook_url = webhook_url if webhook_url is not None else config.crm.webhook_url
        if not webhook_url:
            raise ConfigurationError("BITRIX_WEBHOOK_URL is not configured")
        self.webhook_url = webhook_url.rstrip('/')
        self.executor = executor or RequestExecutor()

    @retry(
        stop=stop_after_attempt(config.crm.query_limit_attempts),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_result(_is_query_limit_exceeded),
        retry_error_callback=_last_response,
    )
    def call(self, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Call a REST method and return the decoded response dict."""
        request = HttpRequest(
            url=f"{self.webhook_url}/{method}.json",
            headers=FORM_HEADERS,
            method='POST',
            body=build_query(params),
        )
        result = self.executor.send(request)
        if not result.is_ok:
            return self._error_response(method, result)

        if not isinstance(result.value, dict):
            return {
                'error': 'unexpected_response',
                'error_description': f"Expected a JSON object from {method}, got {type(result.value).__name__}",
            }
        return result.value

    @staticmethod
    def _error_response(method: str, err: Err) -> Dict[str, Any]:
        # Bitrix reports REST errors as JSON objects with 4xx/5xx codes
        if err.kind == HttpStatusError.kind and err.body:
            try:
                payload = json.loads(err.body)
            except ValueError:
                payload = None
            if isinstance(payload, dict) and payload.get('error'):
                return payload

        logger.debug(f"Bitrix call {method} failed: {err.kind}: {err.detail}")
        return {'error': err.kind, 'error_description': err.detail}
