import re
from typing import Any

SENSITIVE_KEY_RE = re.compile(
    r"^(?:pass|password|new_password|newPassword|token|code|secret|device_token|"
    r"authorization|cookie|set-cookie|otp|one_time_code)$",
    re.IGNORECASE,
)

_SENSITIVE_PAIR_RE = re.compile(
    r"\b(token|code|password|newPassword|new_password)\b\s*[:=]\s*([^\s,;]+)", re.IGNORECASE
)


def redact_secrets(value: Any, max_depth: int = 6, max_string_length: int = 2000) -> Any:
    """Copy of a log payload with secret-looking keys replaced by [REDACTED]"""

    def walk(v: Any, depth: int) -> Any:
        if depth > max_depth:
            return "[Truncated]"
        if isinstance(v, str):
            return v if len(v) <= max_string_length else v[:max_string_length] + "..."
        if isinstance(v, dict):
            return {
                k: "[REDACTED]" if SENSITIVE_KEY_RE.match(str(k)) else walk(item, depth + 1)
                for k, item in v.items()
            }
        if isinstance(v, (list, tuple)):
            return [walk(item, depth + 1) for item in v]
        return v

    return walk(value, 0)


def redact_secrets_in_string(message: Any) -> str:
    return _SENSITIVE_PAIR_RE.sub(lambda m: f"{m.group(1)}=[REDACTED]", str(message))


def mask_email(email: str) -> str:
    local, _, domain = (email or "").partition("@")
    if not domain:
        return "***"
    return f"{local[:1]}***@{domain}"
