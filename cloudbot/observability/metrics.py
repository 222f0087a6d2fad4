"""Prometheus metrics for cloudbot."""

from prometheus_client import Counter, Histogram

# Pricing
PRICE_QUOTES = Counter(
    "cloudbot_price_quotes_total",
    "Price quote requests by outcome",
    labelnames=["provider", "outcome"],
)

PRICE_QUOTE_LATENCY = Histogram(
    "cloudbot_price_quote_latency_seconds",
    "Latency of a single price quote",
    labelnames=["provider"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

PRICE_CACHE_HITS = Counter(
    "cloudbot_price_cache_hits_total",
    "Optimal configuration lookups served from cache",
    labelnames=["provider"],
)

# Capacity
CAPACITY_PROBES = Counter(
    "cloudbot_capacity_probes_total",
    "Region capacity probes by result",
    labelnames=["provider", "result"],
)

# Provisioning
ENGINE_COMMAND_LATENCY = Histogram(
    "cloudbot_engine_command_latency_seconds",
    "Latency of provisioning engine commands",
    labelnames=["command"],
    buckets=(1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0, 600.0, 1800.0),
)

ENGINE_ERRORS = Counter(
    "cloudbot_engine_errors_total",
    "Provisioning engine failures by classified kind",
    labelnames=["command", "kind"],
)

DEPLOYMENTS = Counter(
    "cloudbot_deployments_total",
    "Deploy operations by outcome",
    labelnames=["provider", "outcome"],
)

REGION_FAILOVERS = Counter(
    "cloudbot_region_failovers_total",
    "Regions skipped because of quota or capacity errors",
    labelnames=["provider"],
)

FRAGMENTS_PLACED = Counter(
    "cloudbot_fragments_placed_total",
    "Fragments successfully placed during multi-region deploys",
    labelnames=["provider"],
)
