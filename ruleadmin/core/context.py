from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class RequestContext:
    """Authenticated identity for one request.

    Resolved once from the session cookie at the start of request handling
    and passed explicitly to every service call that needs an actor.
    """

    user_id: UUID
    email: str
    token: str
    expires_at: datetime

    @property
    def actor(self) -> str:
        """Identity recorded in ``modified_by`` / ``inactivated_by`` columns."""
        return self.email
