"""Exception hierarchy for cloudbot.

Price and capacity query errors are absorbed by the components that issue
them; provisioning errors are classified once into :class:`EngineError`.
"""

from cloudbot.domain.enums import EngineErrorKind


class CloudbotError(Exception):
    """Base exception for all cloudbot errors."""

    pass


# =============================================================================
# Price quotes
# =============================================================================


class PriceQuoteError(CloudbotError):
    """A single price query failed."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        region: str | None = None,
        instance_type: str | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.region = region
        self.instance_type = instance_type


class AuthMissingError(PriceQuoteError):
    """No credentials are configured for the provider. Never retried."""

    pass


class UnsupportedError(PriceQuoteError):
    """Provider or template combination is not implemented."""

    pass


class TransientError(PriceQuoteError):
    """Network failure, timeout or rate limit on a read-only query."""

    pass


class QuoteNotFoundError(PriceQuoteError):
    """The provider has no price for the pair."""

    pass


class NoQuotesAvailableError(CloudbotError):
    """Every candidate pair failed or the candidate set was empty."""

    def __init__(self, provider: str, attempted: int) -> None:
        super().__init__(f"No price quotes available for {provider} ({attempted} candidates tried)")
        self.provider = provider
        self.attempted = attempted


# =============================================================================
# Provisioning engine
# =============================================================================


class EngineError(CloudbotError):
    """A provisioning engine command failed.

    ``kind`` is filled by the classification layer; callers switch on it
    rather than on the message text.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: EngineErrorKind = EngineErrorKind.OTHER,
        command: str = "",
        exit_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.command = command
        self.exit_code = exit_code

    @property
    def is_quota(self) -> bool:
        return self.kind == EngineErrorKind.QUOTA_EXCEEDED


# =============================================================================
# Scenario lifecycle
# =============================================================================


class ScenarioNotFoundError(CloudbotError):
    """No scenario with the given id."""

    pass


class InvalidTransitionError(CloudbotError):
    """The requested operation is not allowed from the scenario's status."""

    pass


class ScenarioBusyError(CloudbotError):
    """Another deploy or destroy is in flight for the scenario."""

    pass
