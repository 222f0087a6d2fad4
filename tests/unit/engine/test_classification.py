"""Unit tests for engine error classification."""

import json

from cloudbot.domain.enums import EngineErrorKind
from cloudbot.engine.classification import (
    ErrorClassifier,
    extract_diagnostics,
    extract_error_codes,
)


def _diagnostic(summary: str, detail: str = "", severity: str = "error") -> str:
    return json.dumps(
        {
            "@level": severity,
            "type": "diagnostic",
            "diagnostic": {"severity": severity, "summary": summary, "detail": detail},
        }
    )


class TestExtraction:
    """Tests for the diagnostic and error-code helpers."""

    def test_extract_error_diagnostics_only(self) -> None:
        output = "\n".join(
            [
                '{"type": "version", "terraform": "1.7.0"}',
                _diagnostic("Deprecated attribute", severity="warning"),
                _diagnostic("Error creating instance", "Code: LimitExceeded.SpotQuota"),
                "not json",
            ]
        )
        assert extract_diagnostics(output) == [
            "Error creating instance Code: LimitExceeded.SpotQuota"
        ]

    def test_extract_error_codes(self) -> None:
        texts = ['ErrorCode: "OperationDenied.NoStock"', "Code=InvalidAccessKeyId.NotFound"]
        assert extract_error_codes(texts) == [
            "OperationDenied.NoStock",
            "InvalidAccessKeyId.NotFound",
        ]


class TestErrorClassifier:
    """Tests for ErrorClassifier.classify."""

    def test_quota_from_json_error_code(self) -> None:
        output = _diagnostic("Error: [ERROR] create instance", "Code: LimitExceeded.SpotQuota")
        assert ErrorClassifier().classify(output) == EngineErrorKind.QUOTA_EXCEEDED

    def test_quota_from_nested_code(self) -> None:
        output = _diagnostic("failed", "ErrorCode: QuotaExceeded.Cores")
        assert ErrorClassifier().classify(output) == EngineErrorKind.QUOTA_EXCEEDED

    def test_quota_from_plain_text_marker(self) -> None:
        output = "Error: 实例配额不足, please try another zone"
        assert ErrorClassifier().classify(output) == EngineErrorKind.QUOTA_EXCEEDED

    def test_auth_error(self) -> None:
        output = _diagnostic("failed", "Code: InvalidAccessKeyId.NotFound")
        assert ErrorClassifier().classify(output) == EngineErrorKind.AUTH_ERROR

    def test_other_error(self) -> None:
        output = _diagnostic("Unsupported argument", 'An argument named "foo" is not expected')
        assert ErrorClassifier().classify(output) == EngineErrorKind.OTHER

    def test_custom_markers(self) -> None:
        classifier = ErrorClassifier(quota_markers=["OutOfCapacity"], auth_markers=[])
        assert classifier.classify("OutOfCapacity in zone a") == EngineErrorKind.QUOTA_EXCEEDED
        assert classifier.classify("LimitExceeded.SpotQuota") == EngineErrorKind.OTHER

    def test_summarize_prefers_diagnostics(self) -> None:
        output = "\n".join(["noise", _diagnostic("Bad thing", "details here")])
        assert ErrorClassifier().summarize(output) == "Bad thing details here"

    def test_summarize_truncates(self) -> None:
        assert len(ErrorClassifier().summarize("x" * 2000, limit=100)) == 100
