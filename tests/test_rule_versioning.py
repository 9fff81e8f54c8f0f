"""SCD Type 2 behaviour of the rule versioning service on a real SQL engine."""

from collections import defaultdict
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ruleadmin.core.exceptions import (
    NotAuthenticatedError,
    RuleAlreadyExistsError,
    RuleNotFoundError,
    ValidationError,
)
from ruleadmin.models.engagement_rule import EngagementRule
from ruleadmin.services.rule_versioning import (
    RuleFields,
    RuleListFilter,
    RuleVersioningService,
)


async def _all_rules(session):
    result = await session.execute(select(EngagementRule))
    return list(result.scalars().all())


async def _assert_chain_invariants(session):
    """One latest per chain, gapless versions, closed ranges well-formed."""
    chains = defaultdict(list)
    for rule in await _all_rules(session):
        chains[rule.event_name].append(rule)
    for event_name, versions in chains.items():
        latest = [r for r in versions if r.is_latest == 1]
        assert len(latest) == 1, event_name
        assert sorted(r.version for r in versions) == list(
            range(1, len(versions) + 1)
        )
        for rule in versions:
            if rule.is_latest == 0:
                assert rule.valid_to is not None
            else:
                assert rule.valid_to is None
            if rule.is_active == 1:
                assert rule.inactivated_at is None
                assert rule.inactivated_by is None
            else:
                assert rule.inactivated_at is not None
                assert rule.inactivated_by is not None


class TestCreateRule:
    @pytest.mark.asyncio
    async def test_create_starts_chain_at_version_one(
        self, rule_service, actor, cpx_fields
    ):
        rule = await rule_service.create_rule(actor, "e1", cpx_fields)

        assert rule.event_name == "e1"
        assert rule.billing_type == "CPX"
        assert rule.is_engagement == 1
        assert rule.is_exposure == 0
        assert rule.version == 1
        assert rule.is_latest == 1
        assert rule.is_active == 1
        assert rule.valid_to is None
        assert rule.valid_from is not None
        assert rule.modified_by == actor.email
        assert rule.inactivated_at is None
        assert rule.inactivated_by is None

    @pytest.mark.asyncio
    async def test_empty_tactic_field_is_stored_as_null(self, rule_service, actor):
        fields = RuleFields(
            billing_type="CPE", is_engagement=0, is_exposure=1, tactic_field=""
        )
        rule = await rule_service.create_rule(actor, "e1", fields)
        assert rule.tactic_field is None

    @pytest.mark.asyncio
    async def test_duplicate_create_conflicts(self, rule_service, actor, cpx_fields):
        await rule_service.create_rule(actor, "e1", cpx_fields)

        with pytest.raises(RuleAlreadyExistsError):
            await rule_service.create_rule(actor, "e1", cpx_fields)

        assert len(await rule_service.get_history(actor, "e1")) == 1

    @pytest.mark.asyncio
    async def test_create_conflicts_even_when_chain_is_inactive(
        self, rule_service, actor, cpx_fields
    ):
        await rule_service.create_rule(actor, "e1", cpx_fields)
        await rule_service.toggle_active(actor, "e1", 0)

        with pytest.raises(RuleAlreadyExistsError):
            await rule_service.create_rule(actor, "e1", cpx_fields)

    @pytest.mark.asyncio
    async def test_invalid_billing_type_rejected(self, rule_service, actor):
        fields = RuleFields(billing_type="CPM", is_engagement=1, is_exposure=0)
        with pytest.raises(ValidationError):
            await rule_service.create_rule(actor, "e1", fields)

    @pytest.mark.asyncio
    async def test_missing_actor_rejected_before_store_access(self, cpx_fields):
        repo = AsyncMock()
        service = RuleVersioningService(rule_repo=repo)

        with pytest.raises(NotAuthenticatedError):
            await service.create_rule(None, "e1", cpx_fields)

        repo.get_latest.assert_not_called()
        repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_round_trip_history_has_single_record(
        self, rule_service, actor, cpx_fields
    ):
        created = await rule_service.create_rule(actor, "e1", cpx_fields)

        history = await rule_service.get_history(actor, "e1")

        assert len(history) == 1
        assert history[0].id == created.id
        assert history[0].billing_type == "CPX"
        assert history[0].version == 1


class TestUpdateRule:
    @pytest.mark.asyncio
    async def test_update_closes_old_and_appends_new_version(
        self, rule_service, actor, cpx_fields
    ):
        original = await rule_service.create_rule(actor, "e1", cpx_fields)

        updated = await rule_service.update_rule(
            actor,
            "e1",
            RuleFields(
                billing_type="CPE", is_engagement=0, is_exposure=1, tactic_field="t"
            ),
        )

        assert updated.id != original.id
        assert updated.version == 2
        assert updated.is_latest == 1
        assert updated.valid_to is None
        assert updated.billing_type == "CPE"
        assert updated.tactic_field == "t"
        assert updated.is_active == original.is_active

        history = await rule_service.get_history(actor, "e1")
        assert [r.version for r in history] == [2, 1]
        closed = history[1]
        assert closed.is_latest == 0
        assert closed.valid_to is not None
        assert closed.valid_to >= closed.valid_from
        assert closed.valid_to == updated.valid_from
        assert closed.billing_type == "CPX"

    @pytest.mark.asyncio
    async def test_update_replaces_fields_instead_of_merging(
        self, rule_service, actor
    ):
        await rule_service.create_rule(
            actor,
            "e1",
            RuleFields(
                billing_type="CPX", is_engagement=1, is_exposure=1, tactic_field="x"
            ),
        )

        updated = await rule_service.update_rule(
            actor, "e1", RuleFields(billing_type="CPX", is_engagement=1, is_exposure=1)
        )

        assert updated.tactic_field is None

    @pytest.mark.asyncio
    async def test_update_preserves_inactive_state(
        self, rule_service, actor, cpx_fields
    ):
        await rule_service.create_rule(actor, "e1", cpx_fields)
        inactive = await rule_service.toggle_active(actor, "e1", 0)
        inactivated_at = inactive.inactivated_at

        updated = await rule_service.update_rule(
            actor, "e1", RuleFields(billing_type="CPVS", is_engagement=1, is_exposure=0)
        )

        assert updated.version == 2
        assert updated.is_active == 0
        assert updated.inactivated_at == inactivated_at
        assert updated.inactivated_by == actor.email

    @pytest.mark.asyncio
    async def test_update_unknown_rule_is_not_found(
        self, rule_service, actor, cpx_fields, db_session
    ):
        with pytest.raises(RuleNotFoundError):
            await rule_service.update_rule(actor, "missing", cpx_fields)

        assert await _all_rules(db_session) == []

    @pytest.mark.asyncio
    async def test_many_updates_keep_chain_invariants(
        self, rule_service, actor, cpx_fields, db_session
    ):
        await rule_service.create_rule(actor, "e1", cpx_fields)
        await rule_service.create_rule(actor, "e2", cpx_fields)
        for billing_type in ("CPE", "CPVS", "CPX", "CPE"):
            await rule_service.update_rule(
                actor,
                "e1",
                RuleFields(billing_type=billing_type, is_engagement=1, is_exposure=1),
            )
        await rule_service.toggle_active(actor, "e2", 0)
        await rule_service.update_rule(actor, "e2", cpx_fields)

        await _assert_chain_invariants(db_session)
        history = await rule_service.get_history(actor, "e1")
        assert [r.version for r in history] == [5, 4, 3, 2, 1]


class TestToggleActive:
    @pytest.mark.asyncio
    async def test_deactivate_sets_inactivation_audit(
        self, rule_service, actor, cpx_fields, db_session
    ):
        await rule_service.create_rule(actor, "e1", cpx_fields)

        rule = await rule_service.toggle_active(actor, "e1", 0)

        assert rule.is_active == 0
        assert rule.inactivated_at is not None
        assert rule.inactivated_by == actor.email
        assert rule.version == 1
        assert len(await _all_rules(db_session)) == 1

    @pytest.mark.asyncio
    async def test_reactivate_clears_inactivation_audit(
        self, rule_service, actor, cpx_fields
    ):
        await rule_service.create_rule(actor, "e1", cpx_fields)
        await rule_service.toggle_active(actor, "e1", 0)

        rule = await rule_service.toggle_active(actor, "e1", 1)

        assert rule.is_active == 1
        assert rule.inactivated_at is None
        assert rule.inactivated_by is None
        assert rule.version == 1

    @pytest.mark.asyncio
    async def test_toggle_unknown_rule_is_not_found(self, rule_service, actor):
        with pytest.raises(RuleNotFoundError):
            await rule_service.toggle_active(actor, "missing", 0)

    @pytest.mark.asyncio
    async def test_toggle_leaves_historical_versions_untouched(
        self, rule_service, actor, cpx_fields
    ):
        await rule_service.create_rule(actor, "e1", cpx_fields)
        await rule_service.update_rule(actor, "e1", cpx_fields)

        await rule_service.toggle_active(actor, "e1", 0)

        latest, historical = await rule_service.get_history(actor, "e1")
        assert latest.is_active == 0
        assert historical.is_active == 1
        assert historical.inactivated_at is None


class TestHistoryAndDelete:
    @pytest.mark.asyncio
    async def test_history_of_unknown_name_is_empty(self, rule_service, actor):
        assert await rule_service.get_history(actor, "never") == []

    @pytest.mark.asyncio
    async def test_history_requires_event_name(self, rule_service, actor):
        with pytest.raises(ValidationError):
            await rule_service.get_history(actor, "")

    @pytest.mark.asyncio
    async def test_delete_removes_chain_and_allows_recreate(
        self, rule_service, actor, cpx_fields
    ):
        await rule_service.create_rule(actor, "e1", cpx_fields)
        await rule_service.update_rule(actor, "e1", cpx_fields)
        await rule_service.create_rule(actor, "e2", cpx_fields)

        deleted = await rule_service.delete_rule(actor, "e1")

        assert deleted == 2
        assert await rule_service.get_history(actor, "e1") == []
        assert len(await rule_service.get_history(actor, "e2")) == 1

        recreated = await rule_service.create_rule(actor, "e1", cpx_fields)
        assert recreated.version == 1

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, rule_service, actor):
        assert await rule_service.delete_rule(actor, "missing") == 0


class TestListRules:
    @pytest_asyncio.fixture
    async def populated(self, rule_service, actor, cpx_fields):
        # a: v1, v2 active; b: v1 inactive; c: v1 active
        await rule_service.create_rule(actor, "b", cpx_fields)
        await rule_service.create_rule(actor, "a", cpx_fields)
        await rule_service.update_rule(actor, "a", cpx_fields)
        await rule_service.toggle_active(actor, "b", 0)
        await rule_service.create_rule(actor, "c", cpx_fields)

    @pytest.mark.asyncio
    async def test_default_lists_latest_only(self, rule_service, actor, populated):
        rules = await rule_service.list_rules(actor)

        assert [(r.event_name, r.version) for r in rules] == [
            ("a", 2),
            ("b", 1),
            ("c", 1),
        ]

    @pytest.mark.asyncio
    async def test_only_active_latest(self, rule_service, actor, populated):
        rules = await rule_service.list_rules(
            actor, RuleListFilter(show_history=False, only_active=True)
        )

        assert [r.event_name for r in rules] == ["a", "c"]
        assert all(r.is_latest == 1 and r.is_active == 1 for r in rules)

    @pytest.mark.asyncio
    async def test_history_ignores_latest_flag(self, rule_service, actor, populated):
        rules = await rule_service.list_rules(
            actor, RuleListFilter(show_history=True, only_latest=True)
        )

        assert [(r.event_name, r.version) for r in rules] == [
            ("a", 2),
            ("a", 1),
            ("b", 1),
            ("c", 1),
        ]

    @pytest.mark.asyncio
    async def test_latest_false_returns_all_versions(
        self, rule_service, actor, populated
    ):
        rules = await rule_service.list_rules(actor, RuleListFilter(only_latest=False))
        assert len(rules) == 4

    @pytest.mark.asyncio
    async def test_empty_store_lists_nothing(self, rule_service, actor):
        assert await rule_service.list_rules(actor) == []


class TestStorageConstraints:
    @pytest.mark.asyncio
    async def test_database_rejects_second_latest_record(
        self, rule_service, actor, cpx_fields, db_session
    ):
        await rule_service.create_rule(actor, "e1", cpx_fields)

        db_session.add(
            EngagementRule(
                event_name="e1",
                billing_type="CPX",
                is_engagement=1,
                is_exposure=0,
                is_active=1,
                is_latest=1,
                version=2,
                modified_by="someone@example.com",
            )
        )
        with pytest.raises(IntegrityError):
            await db_session.flush()
        await db_session.rollback()
