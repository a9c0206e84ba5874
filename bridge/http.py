"""
Generic synchronous HTTP request helper.

Every outbound call in the bridge goes through RequestExecutor, which runs a
fixed pipeline: validate -> dispatch -> check status -> decode JSON. Each
phase is terminal on failure. Failures in validation, status and decoding are
reported once through the executor's logger callable; transport failures are
not, unless ExecutorConfig.log_transport_errors is set.

send() returns Ok/Err; execute() raises the typed error instead.
"""

import json
import time
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import urlsplit

import requests

from bridge_config import config

from .errors import DecodeError, HttpStatusError, InvalidInput, TransportError
from .log_sink import default_logger
from .models import Err, ExecutorConfig, HttpRequest, HttpResponse, Ok, Result, Timeouts

logger = logging.getLogger(__name__)

# Body is read one byte at a time so the total deadline is checked as data arrives
READ_CHUNK_SIZE = 1


def validate_url(url: str) -> bool:
    """True for an absolute URL with scheme, host and a valid port (if any)."""
    if not isinstance(url, str) or not url or any(c.isspace() for c in url):
        return False
    try:
        parts = urlsplit(url)
        host = parts.hostname
        parts.port  # raises ValueError for non-numeric or out-of-range ports
        requests.models.PreparedRequest().prepare_url(url, None)
    except (ValueError, requests.exceptions.RequestException):
        return False
    return bool(parts.scheme and parts.netloc and host)


def parse_header_lines(lines: Sequence[str]) -> List[Tuple[str, str]]:
    """Split "Name: Value" lines into ordered (name, value) pairs."""
    pairs = []
    for line in lines:
        name, sep, value = str(line).partition(':')
        if not sep or not name.strip():
            raise InvalidInput(f"Invalid header line: {line!r}")
        pairs.append((name.strip(), value.strip()))
    return pairs


def _check_deadline(deadline: float, timeouts: Timeouts, url: str) -> None:
    if time.monotonic() > deadline:
        raise TransportError(f"Total timeout of {timeouts.total}s exceeded for {url}")


class RequestsTransport:
    """Sends one request on its own requests.Session, closed before returning.

    connect bounds connection setup; total bounds the whole call, including
    reading the body.
    """

    def send(self, request: HttpRequest, timeouts: Timeouts) -> HttpResponse:
        headers: Dict[str, str] = dict(parse_header_lines(request.headers))
        deadline = time.monotonic() + timeouts.total
        try:
            with requests.Session() as session:
                with session.request(
                    request.method,
                    request.url,
                    headers=headers,
                    data=request.payload,
                    timeout=(timeouts.connect, timeouts.total),
                    allow_redirects=False,
                    stream=True,
                ) as response:
                    _check_deadline(deadline, timeouts, request.url)
                    body = bytearray()
                    for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
                        body.extend(chunk)
                        _check_deadline(deadline, timeouts, request.url)
                    return HttpResponse(status_code=response.status_code, body=bytes(body))
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e


class RequestExecutor:
    """Perform one synchronous HTTP request and return its decoded JSON body."""

    def __init__(self, executor_config: Optional[ExecutorConfig] = None, transport=None):
        self.config = executor_config or config_from_settings()
        self.transport = transport or RequestsTransport()
        self.logger_fn = self.config.logger_fn or default_logger

    def send(self, request: HttpRequest) -> Result:
        """Run the pipeline and return Ok(value) or Err(kind, detail)."""
        # validate
        if not validate_url(request.url):
            return self._fail(Err(InvalidInput.kind, f"Invalid URL: {request.url}"))
        try:
            parse_header_lines(request.headers)
        except InvalidInput as e:
            return self._fail(Err(InvalidInput.kind, str(e)))

        # dispatch
        logger.debug(f"{request.method} {request.url}")
        try:
            response = self.transport.send(request, self.config.timeouts)
        except TransportError as e:
            err = Err(TransportError.kind, str(e))
            if self.config.log_transport_errors:
                return self._fail(err)
            logger.debug(f"Transport failure for {request.method} {request.url}: {e}")
            return err

        # check status
        if not 200 <= response.status_code < 300:
            text = response.text
            return self._fail(Err(
                HttpStatusError.kind,
                f"HTTP error: {response.status_code} - Response: {text}",
                status_code=response.status_code,
                body=text,
            ))

        # decode
        try:
            return Ok(json.loads(response.body))
        except ValueError as e:
            text = response.text
            self.logger_fn(f"JSON Decoding Error: {e} - Body: {text}")
            return Err(DecodeError.kind, f"JSON Decoding Error: {e}",
                       status_code=response.status_code, body=text)

    def execute(self, url: str, headers: Sequence[str] = (), method: str = 'GET', body=None) -> Any:
        """Send the request; return the decoded JSON or raise the typed error."""
        return self.send(HttpRequest(url=url, headers=headers, method=method, body=body)).unwrap()

    def _fail(self, err: Err) -> Err:
        self.logger_fn(err.detail)
        return err


def config_from_settings(logger_fn=None) -> ExecutorConfig:
    """Build an ExecutorConfig from the global bridge configuration."""
    return ExecutorConfig(
        timeouts=Timeouts(connect=config.http.connect_timeout, total=config.http.total_timeout),
        logger_fn=logger_fn,
        log_transport_errors=config.http.log_transport_errors,
    )


def execute(url: str, headers: Sequence[str] = (), method: str = 'GET', body=None,
            logger=None, transport=None) -> Any:
    """One-shot request with settings from bridge_config; see RequestExecutor."""
    executor = RequestExecutor(config_from_settings(logger_fn=logger), transport=transport)
    return executor.execute(url, headers, method=method, body=body)
