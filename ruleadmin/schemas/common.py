from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BillingType(str, Enum):
    CPX = "CPX"
    CPE = "CPE"
    CPVS = "CPVS"


class CamelModel(BaseModel):
    """Base for API payloads exchanged with camelCase JSON keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(BaseModel):
    """Generic success response base."""

    success: bool = True


class MessageResponse(SuccessResponse):
    message: str
