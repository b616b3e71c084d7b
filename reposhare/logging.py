"""
RepoShare SDK logging utilities.

Two channels hang off the ``reposhare`` logger: ``reposhare.http`` traces
requests and responses, ``reposhare.viewer`` traces viewer state
transitions. Everything that reaches a log record passes through the
redaction helpers below, so passwords, CSRF tokens and session cookies
never show up in output.
"""

import logging
import re
from typing import Any

_ROOT_NAME = "reposhare"

_sdk_logger = logging.getLogger(_ROOT_NAME)
_http_logger = logging.getLogger(f"{_ROOT_NAME}.http")
_viewer_logger = logging.getLogger(f"{_ROOT_NAME}.viewer")

REDACTED = "[REDACTED]"

DEFAULT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Applied in order; the CSRF rule must run before the generic cookie rule
_REDACTION_RULES: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(r"(x-csrf-token|csrf_token)(['\"]?\s*[:=]\s*['\"]?)[^'\";,\s}]+", re.IGNORECASE),
        rf"\1\2{REDACTED}",
    ),
    (
        re.compile(r"((?:set-)?cookie['\"]?\s*[:=]\s*['\"]?)[^'\"\n}]+", re.IGNORECASE),
        rf"\1{REDACTED}",
    ),
    (
        re.compile(r"(password|secret|token|api_key)(['\"]?\s*[:=]\s*)['\"][^'\"]+['\"]", re.IGNORECASE),
        rf"\1\2'{REDACTED}'",
    ),
]

SENSITIVE_KEY_FRAGMENTS = frozenset({"password", "csrf", "token", "cookie", "secret", "api_key"})


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    viewer_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Attach a handler to the SDK logger and set per-channel levels.

    Args:
        level: Level of the ``reposhare`` logger and the default for both channels
        http_level: Level of ``reposhare.http``; DEBUG shows every request
        viewer_level: Level of ``reposhare.viewer``; DEBUG shows every transition
        handler: Where records go (default: a stderr StreamHandler)
        format_string: Record format (default: ``DEFAULT_FORMAT``)

    Example:
        ```python
        import logging
        from reposhare.logging import configure_logging

        configure_logging(logging.WARNING, viewer_level=logging.DEBUG)
        ```
    """
    target = handler if handler is not None else logging.StreamHandler()
    target.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))

    _sdk_logger.setLevel(level)
    if target not in _sdk_logger.handlers:
        _sdk_logger.addHandler(target)

    channel_levels = {_http_logger: http_level, _viewer_logger: viewer_level}
    for channel, channel_level in channel_levels.items():
        channel.setLevel(level if channel_level is None else channel_level)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Return the SDK logger, or one of its children.

    ``get_logger("http")`` is ``logging.getLogger("reposhare.http")``.
    """
    return _sdk_logger if name is None else logging.getLogger(f"{_ROOT_NAME}.{name}")


def mask_sensitive_data(text: str) -> str:
    """Redact CSRF tokens, cookies and quoted secrets inside free text."""
    for pattern, replacement in _REDACTION_RULES:
        text = pattern.sub(replacement, text)
    return text


def _is_sensitive(key: str, fragments: frozenset[str] | set[str]) -> bool:
    lowered = key.lower()
    return any(fragment in lowered for fragment in fragments)


def _redact(value: Any, fragments: frozenset[str] | set[str]) -> Any:
    if isinstance(value, dict):
        return safe_log_dict(value, fragments)
    if isinstance(value, list):
        return [_redact(item, fragments) for item in value]
    return value


def safe_log_dict(
    data: dict[str, Any], sensitive_keys: frozenset[str] | set[str] | None = None
) -> dict[str, Any]:
    """
    Copy ``data`` with credential values replaced by ``[REDACTED]``.

    A key is sensitive when it contains one of ``sensitive_keys`` (case
    insensitive); nested dicts and lists are walked.
    """
    fragments = SENSITIVE_KEY_FRAGMENTS if sensitive_keys is None else sensitive_keys
    return {
        key: REDACTED if _is_sensitive(key, fragments) else _redact(value, fragments)
        for key, value in data.items()
    }


def _summarise_body(body: Any) -> str | None:
    if isinstance(body, list):
        return f"items={len(body)}"
    if not isinstance(body, dict) or not body:
        return None
    safe = safe_log_dict(body)
    # File text can be large and may itself hold secrets
    if isinstance(safe.get("data"), str):
        safe["data"] = f"<{len(safe['data'])} chars>"
    return f"body={safe}"


def log_http_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    body: dict[str, Any] | None = None,
) -> None:
    """Trace an outgoing request on ``reposhare.http`` at DEBUG."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    fields = [f"{method} {url}"]
    if headers:
        fields.append(f"headers={safe_log_dict(headers)}")
    summary = _summarise_body(body)
    if summary:
        fields.append(summary)
    _http_logger.debug(" | ".join(fields))


def log_http_response(
    status_code: int,
    url: str,
    body: Any = None,
    elapsed_ms: float | None = None,
) -> None:
    """
    Trace a response on ``reposhare.http`` at DEBUG.

    File payloads (the ``data`` field) are reduced to their length and
    JSON arrays to their item count.
    """
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    fields = [f"Response {status_code} from {url}"]
    if elapsed_ms is not None:
        fields.append(f"elapsed={elapsed_ms:.2f}ms")
    summary = _summarise_body(body)
    if summary:
        fields.append(summary)
    _http_logger.debug(" | ".join(fields))


def log_navigation(owner: str, repository_id: str, path: str, state: str) -> None:
    """Trace a viewer transition, e.g. ``Loaded: /alice/<uuid>/src``."""
    if _viewer_logger.isEnabledFor(logging.DEBUG):
        _viewer_logger.debug("%s: /%s/%s/%s", state, owner, repository_id, path)


__all__ = [
    "REDACTED",
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
    "log_navigation",
]
