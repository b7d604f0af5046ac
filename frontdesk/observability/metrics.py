"""Prometheus metrics for Frontdesk."""

from prometheus_client import Counter, Histogram

# Turn metrics
TURNS_PROCESSED = Counter(
    "frontdesk_turns_total",
    "Turns processed by resulting call action",
    labelnames=["action"],
)

TURN_LATENCY = Histogram(
    "frontdesk_turn_latency_seconds",
    "End-to-end turn latency in seconds",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

PIPELINE_STEP_LATENCY = Histogram(
    "frontdesk_pipeline_step_latency_seconds",
    "Latency of individual pipeline steps",
    labelnames=["step"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

TURN_FAILSAFE = Counter(
    "frontdesk_turn_failsafe_total",
    "Turns answered with the last-resort safe phrase",
)

# Triage metrics
TRIAGE_MATCHES = Counter(
    "frontdesk_triage_matches_total",
    "Triage decisions by match method and action",
    labelnames=["match_method", "action"],
)

RULESET_REBUILDS = Counter(
    "frontdesk_ruleset_rebuilds_total",
    "Compiled rule set rebuilds by outcome",
    labelnames=["outcome"],
)

# Optimization / resolver metrics
GATE_DECISIONS = Counter(
    "frontdesk_gate_decisions_total",
    "Optimization gate decisions by reason",
    labelnames=["reason"],
)

RESOLVER_OUTCOMES = Counter(
    "frontdesk_resolver_outcomes_total",
    "Resolver outcomes by deciding tier",
    labelnames=["tier", "matched"],
)

TIER3_TOKENS = Counter(
    "frontdesk_tier3_tokens_total",
    "Tokens consumed by tier-3 calls",
)

TIER3_SPEND = Counter(
    "frontdesk_tier3_spend_usd_total",
    "Estimated tier-3 spend in USD",
)

TIER3_TIMEOUTS = Counter(
    "frontdesk_tier3_timeouts_total",
    "Tier-3 calls abandoned at the timeout",
)

BUDGET_REJECTIONS = Counter(
    "frontdesk_budget_rejections_total",
    "Tier-3 attempts skipped by the budget guard",
    labelnames=["reason"],
)

# Cache metrics
CACHE_HITS = Counter("frontdesk_cache_hits_total", "Cache hits")
CACHE_MISSES = Counter("frontdesk_cache_misses_total", "Cache misses")
CACHE_ERRORS = Counter(
    "frontdesk_cache_errors_total",
    "Cache backend errors by operation",
    labelnames=["operation"],
)
CACHE_ALERTS = Counter(
    "frontdesk_cache_alerts_total",
    "Operator alerts raised for cache outages",
)

# Learning metrics
LEARNING_WRITES = Counter(
    "frontdesk_learning_writes_total",
    "Post-turn learning writes by outcome",
    labelnames=["outcome"],
)

MEMORY_READ_FAILURES = Counter(
    "frontdesk_memory_read_failures_total",
    "Memory hydration queries that failed or timed out",
    labelnames=["query"],
)
