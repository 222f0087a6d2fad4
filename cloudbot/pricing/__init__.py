"""Price quoting and optimisation."""

from cloudbot.pricing.aliyun import AliyunPriceClient
from cloudbot.pricing.base import PriceQuoteClient
from cloudbot.pricing.cache import QuoteCache
from cloudbot.pricing.currency import CurrencyConverter
from cloudbot.pricing.mock import MockPriceQuoteClient
from cloudbot.pricing.optimizer import PriceOptimizer
from cloudbot.pricing.static import StaticPriceClient
from cloudbot.pricing.vultr import VultrPriceClient

__all__ = [
    "AliyunPriceClient",
    "CurrencyConverter",
    "MockPriceQuoteClient",
    "PriceOptimizer",
    "PriceQuoteClient",
    "QuoteCache",
    "StaticPriceClient",
    "VultrPriceClient",
]
