"""SCD Type 2 versioning of engagement rules.

A rule chain is every record sharing one ``event_name``.  Content changes
never touch an existing record: the current latest version is closed
(``is_latest = 0``, ``valid_to = now``) and a successor with
``version + 1`` is inserted in the same transaction.  The active flag is a
separate state on the latest record only:

    {Active, Inactive} x {Latest, Historical}

Latest records may switch between Active and Inactive in place; Historical
records are frozen.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import AsyncIterator, Callable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ruleadmin.core.constants import BILLING_TYPES, FIRST_VERSION, FLAG_VALUES
from ruleadmin.core.context import RequestContext
from ruleadmin.core.exceptions import (
    ConcurrentRuleUpdateError,
    ConflictError,
    FrozenVersionError,
    NotAuthenticatedError,
    RuleAdminError,
    RuleAlreadyExistsError,
    RuleNotFoundError,
    StorageError,
    ValidationError,
)
from ruleadmin.models.base import utcnow
from ruleadmin.models.engagement_rule import EngagementRule
from ruleadmin.repositories.engagement_rule_repository import EngagementRuleRepository

logger = logging.getLogger(__name__)


class Activation(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Currency(str, Enum):
    LATEST = "latest"
    HISTORICAL = "historical"


def rule_state(rule: EngagementRule) -> Tuple[Activation, Currency]:
    """Return the (activation, currency) state of a version record."""
    activation = Activation.ACTIVE if rule.is_active else Activation.INACTIVE
    currency = Currency.LATEST if rule.is_latest else Currency.HISTORICAL
    return activation, currency


def apply_activation(
    rule: EngagementRule, is_active: int, actor: str, now: datetime
) -> None:
    """Move a latest record to Active or Inactive in place.

    Re-applying the current state is allowed; deactivating an inactive rule
    refreshes ``inactivated_at`` / ``inactivated_by``.
    """
    _, currency = rule_state(rule)
    if currency is Currency.HISTORICAL:
        raise FrozenVersionError(
            f"Version {rule.version} of '{rule.event_name}' is historical"
        )
    rule.is_active = is_active
    if is_active:
        rule.inactivated_at = None
        rule.inactivated_by = None
    else:
        rule.inactivated_at = now
        rule.inactivated_by = actor
    rule.updated_at = now


@dataclass(frozen=True)
class RuleFields:
    """Business fields of a rule version; replaced wholesale on update."""

    billing_type: Optional[str]
    is_engagement: Optional[int]
    is_exposure: Optional[int]
    tactic_field: Optional[str] = None


@dataclass(frozen=True)
class RuleListFilter:
    """Options for :meth:`RuleVersioningService.list_rules`.

    ``show_history`` returns every version and overrides ``only_latest``.
    """

    show_history: bool = False
    only_active: bool = False
    only_latest: bool = True

    @property
    def latest_only(self) -> bool:
        return self.only_latest and not self.show_history


def _is_blank(event_name: Optional[str]) -> bool:
    return not event_name or not event_name.strip()


class RuleValidator:
    """Input checks shared by every operation that takes an event name.

    A whitespace-only event name counts as missing in every check.
    """

    @staticmethod
    def validate_event_name(event_name: Optional[str]) -> str:
        if _is_blank(event_name):
            raise ValidationError("eventName is required")
        return event_name

    @staticmethod
    def validate_fields(event_name: Optional[str], fields: RuleFields) -> None:
        if (
            _is_blank(event_name)
            or not fields.billing_type
            or fields.is_engagement is None
            or fields.is_exposure is None
        ):
            raise ValidationError("Missing required fields")
        if fields.billing_type not in BILLING_TYPES:
            raise ValidationError("Invalid billingType. Must be CPX, CPE, or CPVS")
        if (
            fields.is_engagement not in FLAG_VALUES
            or fields.is_exposure not in FLAG_VALUES
        ):
            raise ValidationError("isEngagement and isExposure must be 0 or 1")

    @staticmethod
    def validate_activation(event_name: Optional[str], is_active: Optional[int]) -> None:
        if _is_blank(event_name) or is_active not in FLAG_VALUES:
            raise ValidationError("eventName and isActive (0 or 1) are required")


def _require_actor(ctx: Optional[RequestContext]) -> RequestContext:
    if ctx is None:
        raise NotAuthenticatedError()
    return ctx


class RuleVersioningService:
    """Read and write engagement-rule chains with SCD Type 2 semantics.

    Every write runs as one unit of work: it either commits completely or
    is rolled back, so a chain is never observed with zero or two latest
    records.  No operation retries on its own.
    """

    def __init__(self, rule_repo: EngagementRuleRepository) -> None:
        self._repo = rule_repo

    # ------------------------------------------------------------------
    # Transaction handling
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _unit_of_work(
        self,
        operation: str,
        on_integrity_error: Callable[[], ConflictError] = ConcurrentRuleUpdateError,
    ) -> AsyncIterator[None]:
        """Commit on success; roll back and translate failures otherwise."""
        try:
            yield
            await self._repo.commit()
        except RuleAdminError:
            await self._repo.rollback()
            raise
        except IntegrityError as exc:
            await self._repo.rollback()
            logger.warning("Integrity conflict during %s: %s", operation, exc.orig)
            raise on_integrity_error() from exc
        except SQLAlchemyError as exc:
            await self._repo.rollback()
            logger.error("Storage failure during %s", operation, exc_info=True)
            raise StorageError(f"Failed to {operation}") from exc

    @asynccontextmanager
    async def _read(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error("Storage failure during %s", operation, exc_info=True)
            raise StorageError(f"Failed to {operation}") from exc

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_rules(
        self,
        ctx: Optional[RequestContext],
        rule_filter: Optional[RuleListFilter] = None,
    ) -> List[EngagementRule]:
        """Return rules ordered by event name then version (newest first)."""
        _require_actor(ctx)
        rule_filter = rule_filter or RuleListFilter()
        async with self._read("fetch rules"):
            return await self._repo.list_rules(
                latest_only=rule_filter.latest_only,
                active_only=rule_filter.only_active,
            )

    async def get_history(
        self, ctx: Optional[RequestContext], event_name: Optional[str]
    ) -> List[EngagementRule]:
        """Return the whole chain for *event_name*; empty if it never existed."""
        _require_actor(ctx)
        event_name = RuleValidator.validate_event_name(event_name)
        async with self._read("fetch rule history"):
            return await self._repo.get_history(event_name)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_rule(
        self,
        ctx: Optional[RequestContext],
        event_name: Optional[str],
        fields: RuleFields,
    ) -> EngagementRule:
        """Start a new chain at version 1, active and latest."""
        actor = _require_actor(ctx).actor
        RuleValidator.validate_fields(event_name, fields)

        async with self._unit_of_work("create rule", RuleAlreadyExistsError):
            if await self._repo.get_latest(event_name) is not None:
                raise RuleAlreadyExistsError()
            rule = await self._repo.create(
                event_name=event_name,
                billing_type=fields.billing_type,
                tactic_field=fields.tactic_field or None,
                is_engagement=fields.is_engagement,
                is_exposure=fields.is_exposure,
                is_active=1,
                is_latest=1,
                version=FIRST_VERSION,
                valid_from=utcnow(),
                valid_to=None,
                modified_by=actor,
            )

        logger.info("Created rule %s v%d by %s", event_name, rule.version, actor)
        return rule

    async def update_rule(
        self,
        ctx: Optional[RequestContext],
        event_name: Optional[str],
        fields: RuleFields,
    ) -> EngagementRule:
        """Close the latest version and append its successor atomically.

        The successor takes the supplied business fields verbatim and keeps
        the predecessor's activation state, including for inactive rules.
        """
        actor = _require_actor(ctx).actor
        RuleValidator.validate_fields(event_name, fields)

        async with self._unit_of_work("update rule"):
            current = await self._repo.get_latest(event_name, for_update=True)
            if current is None:
                raise RuleNotFoundError()

            now = utcnow()
            await self._repo.close_version(current, now)
            rule = await self._repo.create(
                event_name=event_name,
                billing_type=fields.billing_type,
                tactic_field=fields.tactic_field or None,
                is_engagement=fields.is_engagement,
                is_exposure=fields.is_exposure,
                is_active=current.is_active,
                is_latest=1,
                version=current.version + 1,
                valid_from=now,
                valid_to=None,
                modified_by=actor,
                inactivated_at=current.inactivated_at,
                inactivated_by=current.inactivated_by,
            )

        logger.info("Updated rule %s to v%d by %s", event_name, rule.version, actor)
        return rule

    async def toggle_active(
        self,
        ctx: Optional[RequestContext],
        event_name: Optional[str],
        is_active: Optional[int],
    ) -> EngagementRule:
        """Set the active flag on the latest version without a new version."""
        actor = _require_actor(ctx).actor
        RuleValidator.validate_activation(event_name, is_active)

        async with self._unit_of_work("toggle active status"):
            current = await self._repo.get_latest(event_name, for_update=True)
            if current is None:
                raise RuleNotFoundError()
            apply_activation(current, is_active, actor, utcnow())
            await self._repo.flush()

        logger.info(
            "Rule %s v%d set %s by %s",
            event_name,
            current.version,
            rule_state(current)[0].value,
            actor,
        )
        return current

    async def delete_rule(
        self, ctx: Optional[RequestContext], event_name: Optional[str]
    ) -> int:
        """Hard-delete every version of *event_name*; idempotent."""
        actor = _require_actor(ctx).actor
        event_name = RuleValidator.validate_event_name(event_name)

        async with self._unit_of_work("delete rule"):
            deleted = await self._repo.delete_chain(event_name)

        logger.info("Deleted %d version(s) of rule %s by %s", deleted, event_name, actor)
        return deleted
