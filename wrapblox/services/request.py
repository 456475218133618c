"""
Request descriptors and per-call options.
"""

import hashlib
import json
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import urlencode

MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


@dataclass(frozen=True)
class RequestOptions:
    """
    Per-call configuration accepted by the request layer.

    Attributes:
        use_cache: Read from and write to the cache (default True)
        cookie: Credential override for this call only
        params: Query parameters; list values are sent as repeated keys
        body: JSON request payload
    """

    use_cache: bool = True
    cookie: str | None = None
    params: dict[str, Any] | None = None
    body: Any = None


def _freeze_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return value


def _encode_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class RequestDescriptor:
    """
    Immutable description of one upstream call.

    The fingerprint depends on method, service, path, query and body only;
    credentials never affect it.
    """

    method: str
    service: str
    path: str
    params: tuple[tuple[str, Any], ...] = ()
    body: Any = None
    cookie: str | None = None
    use_cache: bool = True
    csrf_token: str | None = field(default=None, compare=False)

    @classmethod
    def build(
        cls,
        method: str,
        service: str,
        path: str,
        options: RequestOptions | None = None,
    ) -> "RequestDescriptor":
        options = options or RequestOptions()
        params = tuple(
            (key, _freeze_value(value))
            for key, value in (options.params or {}).items()
            if value is not None
        )
        return cls(
            method=method.upper(),
            service=service,
            path=path if path.startswith("/") else f"/{path}",
            params=params,
            body=options.body,
            cookie=options.cookie,
            use_cache=options.use_cache,
        )

    @property
    def is_mutating(self) -> bool:
        return self.method in MUTATING_METHODS

    def get_param(self, key: str) -> Any:
        for name, value in self.params:
            if name == key:
                return value
        return None

    def with_param(self, key: str, value: Any) -> "RequestDescriptor":
        """Copy with a query parameter set (or removed when value is None)."""
        params = tuple((k, v) for k, v in self.params if k != key)
        if value is not None:
            params = params + ((key, _freeze_value(value)),)
        return replace(self, params=params)

    def query_params(self) -> list[tuple[str, str]]:
        """Flatten params into (key, value) pairs, expanding list values."""
        pairs: list[tuple[str, str]] = []
        for key, value in self.params:
            if isinstance(value, tuple):
                pairs.extend((key, _encode_value(item)) for item in value)
            else:
                pairs.append((key, _encode_value(value)))
        return pairs

    def canonical_query(self) -> str:
        # Stable sort keeps the order of repeated keys
        pairs = sorted(self.query_params(), key=lambda pair: pair[0])
        return urlencode(pairs)

    def body_hash(self) -> str:
        if self.body is None:
            return ""
        encoded = json.dumps(self.body, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(encoded.encode()).hexdigest()[:16]

    @property
    def fingerprint(self) -> str:
        return (
            f"{fingerprint_prefix(self.method, self.service, self.path)}"
            f"?{self.canonical_query()}#{self.body_hash()}"
        )


def fingerprint_prefix(method: str, service: str, path: str = "") -> str:
    """Prefix shared by every fingerprint for a method/service/path."""
    if path and not path.startswith("/"):
        path = f"/{path}"
    return f"{method.upper()}:{service}:{path}"
