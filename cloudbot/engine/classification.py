"""Translate engine output into a structured error kind.

This module is the only place that inspects engine output text. It reads
Terraform's machine-readable ``-json`` diagnostics first, then provider
error codes embedded in them, and only then falls back to marker
substrings. Marker rules track provider error strings and will drift as
providers change their messages.
"""

import json
import re
from collections.abc import Iterable

from cloudbot.domain.enums import EngineErrorKind

DEFAULT_QUOTA_MARKERS: tuple[str, ...] = (
    "LimitExceeded.SpotQuota",
    "配额不足",
    "QuotaExceeded",
    "InsufficientInstanceCapacity",
    "OperationDenied.NoStock",
    "ResourceInsufficient",
    "InstanceLimitExceeded",
)

DEFAULT_AUTH_MARKERS: tuple[str, ...] = (
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "AuthFailure",
    "InvalidClientTokenId",
    "Forbidden.RAM",
)

_ERROR_CODE = re.compile(r"""(?:\bCode|ErrorCode|error_code)\s*[=:]\s*["']?([A-Za-z][\w.]+)""")


def extract_diagnostics(output: str) -> list[str]:
    """Error diagnostics from ``terraform ... -json`` output lines."""
    messages: list[str] = []
    for line in output.splitlines():
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            event = json.loads(line)
        except ValueError:
            continue
        diagnostic = event.get("diagnostic") if isinstance(event, dict) else None
        if not isinstance(diagnostic, dict) or diagnostic.get("severity") != "error":
            continue
        parts = (diagnostic.get("summary"), diagnostic.get("detail"))
        text = " ".join(part for part in parts if part)
        if text:
            messages.append(text)
    return messages


def extract_error_codes(texts: Iterable[str]) -> list[str]:
    """Provider error codes such as ``LimitExceeded.SpotQuota``."""
    return [code for text in texts for code in _ERROR_CODE.findall(text)]


class ErrorClassifier:
    """Maps engine output to an EngineErrorKind."""

    def __init__(
        self,
        quota_markers: Iterable[str] = DEFAULT_QUOTA_MARKERS,
        auth_markers: Iterable[str] = DEFAULT_AUTH_MARKERS,
    ) -> None:
        self._quota_markers = tuple(quota_markers)
        self._auth_markers = tuple(auth_markers)

    def classify(self, output: str) -> EngineErrorKind:
        diagnostics = extract_diagnostics(output)
        texts = diagnostics or [output]

        for code in extract_error_codes(texts):
            if self._matches(code, self._quota_markers):
                return EngineErrorKind.QUOTA_EXCEEDED
            if self._matches(code, self._auth_markers):
                return EngineErrorKind.AUTH_ERROR

        text = "\n".join(texts)
        if any(marker in text for marker in self._quota_markers):
            return EngineErrorKind.QUOTA_EXCEEDED
        if any(marker in text for marker in self._auth_markers):
            return EngineErrorKind.AUTH_ERROR
        return EngineErrorKind.OTHER

    def summarize(self, output: str, limit: int = 500) -> str:
        """Short human-readable reason for a failure."""
        diagnostics = extract_diagnostics(output)
        text = "; ".join(diagnostics) if diagnostics else output.strip()
        return text[-limit:] if len(text) > limit else text

    @staticmethod
    def _matches(code: str, markers: tuple[str, ...]) -> bool:
        return any(code == marker or code.startswith(f"{marker}.") for marker in markers)
