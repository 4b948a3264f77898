from prometheus_client import Counter, Histogram

# Connector Metrics
connector_calls = Counter(
    'rosetta_connector_calls_total',
    'Total number of connector calls',
    ['operation']
)

connector_retries = Counter(
    'rosetta_connector_retries_total',
    'Total number of retried connector calls',
    ['operation']
)

connector_failures = Counter(
    'rosetta_connector_failures_total',
    'Total number of failed connector calls',
    ['operation', 'reason']
)

connector_duration = Histogram(
    'rosetta_connector_duration_seconds',
    'Connector call duration including retries',
    ['operation']
)

# Cache Metrics
cache_hits = Counter(
    'rosetta_cache_hits_total',
    'Total number of response cache hits',
    ['endpoint']
)

cache_misses = Counter(
    'rosetta_cache_misses_total',
    'Total number of response cache misses',
    ['endpoint']
)

cache_stale = Counter(
    'rosetta_cache_stale_total',
    'Cache entries discarded because the tip moved',
    ['endpoint']
)

reorgs = Counter(
    'rosetta_reorgs_total',
    'Tip changes that went backwards or replaced the tip hash'
)
