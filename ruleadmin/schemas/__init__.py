"""Pydantic schemas package – re-exports for convenience."""

# Common
from ruleadmin.schemas.common import (
    BillingType as BillingType,
    CamelModel as CamelModel,
    SuccessResponse as SuccessResponse,
    MessageResponse as MessageResponse,
)

# Engagement rule schemas
from ruleadmin.schemas.engagement_rule import (
    RuleUpsertRequest as RuleUpsertRequest,
    ToggleActiveRequest as ToggleActiveRequest,
    RuleOut as RuleOut,
    RuleDeleteResponse as RuleDeleteResponse,
)

# Auth schemas
from ruleadmin.schemas.auth import (
    CredentialsRequest as CredentialsRequest,
    CurrentUserOut as CurrentUserOut,
)
