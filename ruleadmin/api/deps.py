"""API-layer dependency functions.

Re-exports all dependency factories from ``ruleadmin.dependencies`` so that
endpoint modules only need to import from ``ruleadmin.api.deps``.
"""

from ruleadmin.dependencies import (
    # Repository factories
    get_rule_repo,
    get_user_repo,
    get_session_repo,
    # Service factories
    get_auth_service,
    get_rule_service,
    # Request context
    get_session_token,
    get_request_context,
)

__all__ = [
    "get_rule_repo",
    "get_user_repo",
    "get_session_repo",
    "get_auth_service",
    "get_rule_service",
    "get_session_token",
    "get_request_context",
]
