"""
Application constants.

Centralized constants for the application.
"""

# ========================================================================
# RECORD STORE KEYS
# ========================================================================

WALLET_KEY_PREFIX = "wallet:"
WALLET_KEY_PATTERN = "wallet:*"
WALLET_TXS_SUFFIX = ":txs"
TRANSACTION_KEY_PREFIX = "transaction:"
TRANSACTION_HASH_KEY_PREFIX = "txhash:"
MONITOR_CURSOR_KEY = "monitor:lastScannedBlock"

# ========================================================================
# BLOCKCHAIN CONSTANTS
# ========================================================================

WEI_PER_ETH = 10**18
ETH_DECIMALS = 18

# Priority fee used for EIP-1559 transfers (in gwei)
MAX_PRIORITY_FEE_GWEI = 1.5

# Thread pool for synchronous Web3 calls
BLOCKCHAIN_EXECUTOR_WORKERS = 4

# ========================================================================
# TRANSACTION LIFECYCLE
# ========================================================================

# Compare-and-set attempts for a single status transition
TRANSITION_MAX_ATTEMPTS = 5

DROPPED_TRANSACTION_ERROR = "Transaction was replaced or dropped"

# ========================================================================
# JOB QUEUE
# ========================================================================

TRANSACTION_JOB_ACTOR = "process_transaction"

# Dramatiq Redis namespace; job history lives under <namespace>:history:<queue>
QUEUE_NAMESPACE = "dramatiq"

JOB_STATES = ("enqueued", "active", "retrying", "completed", "failed", "skipped")
JOB_STATE_NOT_FOUND = "not_found"
