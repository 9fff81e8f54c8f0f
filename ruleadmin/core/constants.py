from typing import FrozenSet, Tuple

# Must match schemas.common.BillingType
BILLING_TYPE_VALUES: Tuple[str, ...] = ("CPX", "CPE", "CPVS")

BILLING_TYPES: FrozenSet[str] = frozenset(BILLING_TYPE_VALUES)

BILLING_TYPE_CHECK_CLAUSE: str = (
    f"billing_type IN ({', '.join(repr(b) for b in BILLING_TYPE_VALUES)})"
)

# 0/1 flags are stored as small integers to match the reporting warehouse
FLAG_VALUES: FrozenSet[int] = frozenset({0, 1})

# SQL CHECK clause for 0/1 flag columns
FLAG_CHECK_CLAUSE: str = "{col} IN (0, 1)"

FIRST_VERSION: int = 1

EVENT_NAME_MAX_LENGTH: int = 255
TACTIC_FIELD_MAX_LENGTH: int = 255

PASSWORD_MIN_LENGTH: int = 8
PASSWORD_MAX_LENGTH: int = 128

# 32 random bytes, hex encoded
SESSION_TOKEN_BYTES: int = 32
