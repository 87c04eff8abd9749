SCHEMA_VERSION = "1.0"

# Identifier generation: at most MAX_RETRIES + 1 attempts
MAX_RETRIES = 2
UUID_LENGTH = 16

UUID_MODE_FAITHFUL = "faithful"
UUID_MODE_CORRECTED = "corrected"
UUID_MODES = (UUID_MODE_FAITHFUL, UUID_MODE_CORRECTED)

DEFAULT_CHAIN_ID = 1

# Event names
EVENT_MINT = "Mint"
EVENT_BURN = "Burn"
EVENT_UPDATE = "Update"  # reserved, not emitted by any registry path
EVENT_WITHDRAWAL = "Withdrawal"

TOPIC_PREFIX = "soulreg."
