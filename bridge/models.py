"""
Data models for the bridge HTTP layer.
Requests, transport responses, executor configuration and call results.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence, Union

from .errors import ERROR_KINDS, DecodeError, HttpStatusError

# Methods whose body is never sent
BODYLESS_METHODS = ('GET', 'HEAD')


@dataclass
class HttpRequest:
    """One outbound request. Headers are "Name: Value" lines, in order."""
    url: str
    headers: Sequence[str] = ()
    method: str = 'GET'
    body: Optional[Union[bytes, str]] = None

    def __post_init__(self):
        self.method = (self.method or 'GET').upper()
        self.headers = list(self.headers or ())

    @property
    def payload(self) -> Optional[Union[bytes, str]]:
        """Body to put on the wire; dropped for GET/HEAD."""
        if self.method in BODYLESS_METHODS:
            return None
        return self.body


@dataclass
class HttpResponse:
    """Status code and raw body bytes as reported by the transport."""
    status_code: int
    body: bytes = b''

    @property
    def text(self) -> str:
        return self.body.decode('utf-8', errors='replace')


@dataclass
class Timeouts:
    connect: float = 5.0
    total: float = 10.0


@dataclass
class ExecutorConfig:
    """Explicit executor settings, passed at construction."""
    timeouts: Timeouts = field(default_factory=Timeouts)
    logger_fn: Optional[Callable[[str], None]] = None
    log_transport_errors: bool = False


@dataclass
class Ok:
    value: Any

    is_ok = True

    def unwrap(self) -> Any:
        return self.value


@dataclass
class Err:
    """Failed call: error kind plus the detail text the caller would log."""
    kind: str
    detail: str
    status_code: Optional[int] = None
    body: Optional[str] = None

    is_ok = False

    def unwrap(self) -> Any:
        raise self.to_exception()

    def to_exception(self) -> Exception:
        if self.kind == HttpStatusError.kind:
            return HttpStatusError(self.status_code, self.body or '')
        if self.kind == DecodeError.kind:
            return DecodeError(self.detail, self.body)
        return ERROR_KINDS[self.kind](self.detail)


Result = Union[Ok, Err]
