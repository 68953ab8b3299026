"""
Global configuration and safety defaults.

Callers bound runaway cost with these limits before handing input to the
graph builder, and with ``DEFAULT_MAX_DEPTH`` on traversal and impact calls.
"""

from pathlib import Path

# --- Safety Limits ---
# Largest graph a single build will accept
MAX_NODES = 10_000

# Outgoing edges allowed per source node
MAX_EDGES_PER_NODE = 100

# Hops followed by traversal and impact analysis unless overridden
DEFAULT_MAX_DEPTH = 10

# --- Impact risk thresholds ---
# Minimum impacted-node count for each risk level. Zero impacted is "low".
RISK_MEDIUM_MIN = 1
RISK_HIGH_MIN = 6
RISK_CRITICAL_MIN = 21

# --- Scoring ---
# Edges scored below this are filtered out by batch scoring
MIN_EDGE_CONFIDENCE = 40

# Scored edges below this are flagged implicit
IMPLICIT_CONFIDENCE_CEILING = 80

# --- Files ---
CONFIG_DIR = Path(".iacgraph")
CONFIG_FILE = CONFIG_DIR / "config.yaml"
