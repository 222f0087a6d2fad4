"""Fixed-rate currency normalisation used for ranking quotes."""

from collections.abc import Mapping

from cloudbot.errors import UnsupportedError


class CurrencyConverter:
    """Converts amounts into a reference currency with a static rate table.

    ``rates`` maps a currency code to how many units of the reference
    currency one unit of it is worth.
    """

    def __init__(self, rates: Mapping[str, float], reference: str = "CNY") -> None:
        self._reference = reference.upper()
        self._rates = {code.upper(): rate for code, rate in rates.items()}
        self._rates.setdefault(self._reference, 1.0)

    @property
    def reference(self) -> str:
        return self._reference

    def to_reference(self, amount: float, currency: str) -> float:
        """Convert ``amount`` into the reference currency.

        Args:
            amount: Amount in ``currency``
            currency: ISO code, case-insensitive

        Returns:
            The amount in the reference currency

        Raises:
            UnsupportedError: No rate is configured for ``currency``
        """
        rate = self._rates.get(currency.upper())
        if rate is None:
            raise UnsupportedError(f"No conversion rate for {currency} -> {self._reference}")
        return amount * rate
