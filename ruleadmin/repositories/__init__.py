"""Repository layer – all database access goes through here.

Repositories encapsulate SQLAlchemy queries so that the service layer
only contains business logic and owns the transaction boundary.
"""

from ruleadmin.repositories.base import BaseRepository
from ruleadmin.repositories.engagement_rule_repository import EngagementRuleRepository
from ruleadmin.repositories.session_repository import SessionRepository
from ruleadmin.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "EngagementRuleRepository",
    "SessionRepository",
    "UserRepository",
]
