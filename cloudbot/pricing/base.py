"""Price quote client interface."""

from abc import ABC, abstractmethod

from cloudbot.domain.pricing import PriceQuote


class PriceQuoteClient(ABC):
    """Queries one provider's pricing for a single (region, instance type) pair.

    Implementations are side-effect free, never retry internally, and raise
    one of AuthMissingError, UnsupportedError, TransientError or
    QuoteNotFoundError. Callers apply the per-call timeout.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider this client prices."""
        pass

    @abstractmethod
    async def quote(self, region: str, instance_type: str) -> PriceQuote:
        """Price one instance type in one region.

        Args:
            region: Provider region id
            instance_type: Provider instance type id

        Returns:
            Hourly price in the currency the provider reports

        Raises:
            AuthMissingError: Credentials are absent or rejected
            UnsupportedError: The provider cannot price this pair
            TransientError: Network failure or throttling
            QuoteNotFoundError: The pair has no price
        """
        pass

    async def list_regions(self) -> list[str]:
        """Regions the provider reports; empty when the client cannot list them."""
        return []

    async def list_instance_types(self, region: str) -> list[str]:  # noqa: ARG002
        """Instance types available in a region; empty when unknown."""
        return []

    async def aclose(self) -> None:
        """Release network resources."""
        return None
