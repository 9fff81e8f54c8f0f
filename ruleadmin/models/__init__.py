from ruleadmin.models.base import Base
from ruleadmin.models.user import User
from ruleadmin.models.session import UserSession
from ruleadmin.models.engagement_rule import EngagementRule

__all__ = [
    "Base",
    "User",
    "UserSession",
    "EngagementRule",
]
