"""
Collaboration Kernel — Threshold Constants

All magic numbers used by the graph builder, community detection,
health scoring and insight rules live here.
"""

# --- Interaction weights ---
MENTION_WEIGHT: int = 3
REPLY_WEIGHT: int = 2
REACTION_WEIGHT: int = 1

# --- Aggregates ---
TOP_CONNECTOR_LIMIT: int = 5

# --- Label propagation ---
MAX_LABEL_PROPAGATION_ITERATIONS: int = 10

# --- Timestamps ---
# Values below this are unix seconds, at or above it milliseconds.
SECONDS_MS_THRESHOLD: int = 1_000_000_000_000
MS_PER_DAY: int = 24 * 60 * 60 * 1000

# --- Health score ---
COMPONENT_MAX: int = 25
SINGLE_CONNECTOR_BALANCE: int = 22
OVERLOAD_RATIO_NO_MEDIAN: int = 3

# (max cluster count, factor) steps for the cross-team component.
CLUSTER_FACTOR_STEPS = ((2, 1.0), (4, 0.9), (6, 0.75))
CLUSTER_FACTOR_FLOOR: float = 0.6

# --- Insights ---
INSIGHT_CONNECTOR_LIMIT: int = 3
OVERLOAD_MIN_WEIGHTED_DEGREE: int = 6
LARGE_CLUSTER_MIN_SIZE: int = 3
LARGE_CLUSTER_AVG_FACTOR: float = 1.5
SILO_MAX_SIZE: int = 2
SILO_AVG_FACTOR: float = 0.5
GROWTH_MIN_USERS: int = 3
