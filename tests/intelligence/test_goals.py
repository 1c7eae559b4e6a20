"""Tests for the goal generator."""

from datetime import timedelta

import pytest

from account_intel.intelligence.goals import (
    deduplicate_goals,
    generate_goals,
    get_top_goals,
    match_stage_template,
)
from account_intel.intelligence.schemas import (
    AccountAnalysis,
    EngagementVelocity,
    Goal,
    GoalContext,
    MergedData,
)
from account_intel.models.account import (
    Account,
    ActionItem,
    ActionItemOwner,
    ActionItemStatus,
    Momentum,
    Risk,
    RiskSeverity,
    RiskType,
)
from account_intel.models.participant import ParticipantProfile, ParticipantRole


@pytest.fixture
def make_context(now):
    """Factory for goal contexts around the Toyota account."""

    def _make(
        deal_stage: str = "POC",
        risks: list[Risk] | None = None,
        action_items: list[ActionItem] | None = None,
        roles: list[ParticipantRole] | None = None,
    ) -> GoalContext:
        account = Account(
            id="toyota.com", name="Toyota", domain="toyota.com", deal_stage=deal_stage
        )
        analysis = AccountAnalysis(
            momentum=Momentum.STABLE,
            momentum_score=60,
            engagement_velocity=EngagementVelocity.MEDIUM,
            days_in_stage=10,
            days_since_last_contact=3,
            risks=risks or [],
            health_score=60,
        )
        profiles = {
            f"p{n}@toyota.com": ParticipantProfile(email=f"p{n}@toyota.com", role=role)
            for n, role in enumerate(roles or [])
        }
        merged = MergedData(
            account=account,
            participants={},
            timeline=[],
            action_items=action_items or [],
        )
        return GoalContext(
            account=account, analysis=analysis, participants=profiles, merged=merged
        )

    return _make


def _risk(now, id: str, severity: RiskSeverity, description: str) -> Risk:
    return Risk(
        id=id,
        type=RiskType.TIMELINE,
        severity=severity,
        description=description,
        detected_date=now,
        mitigation="Do something about it",
    )


def _item(now, id: str, owner: ActionItemOwner, status: ActionItemStatus) -> ActionItem:
    return ActionItem(
        id=id,
        description=f"Task {id}",
        owner=owner,
        created_date=now - timedelta(days=10),
        status=status,
    )


class TestStageTemplates:
    """Stage goals come from the first matching template."""

    @pytest.mark.parametrize(
        "stage,first_title",
        [
            ("Discovery", "Confirm decision-making process and timeline"),
            ("Technical Pilot", "Confirm POC success criteria are on track"),
            ("Contract Negotiation", "Resolve outstanding contract terms"),
            ("Closed Won", "Confirm implementation milestones"),
        ],
    )
    def test_stage_keywords_match(self, stage, first_title):
        """Stage names are matched case-insensitively by keyword."""
        template = match_stage_template(stage)
        assert template is not None
        assert template.goals[0].title == first_title

    def test_unknown_stage_has_no_template(self):
        """Unmatched or missing stages fall back."""
        assert match_stage_template("Renewal chat") is None
        assert match_stage_template(None) is None

    def test_poc_without_buyer_asks_for_briefing(self, make_context):
        """The briefing goal appears only when no economic buyer is known."""
        goals = generate_goals(make_context())

        assert [g.title for g in goals] == [
            "Confirm POC success criteria are on track",
            "Address any technical blockers",
            "Schedule executive briefing before POC ends",
            "Verify procurement timeline",
        ]
        assert all(g.priority == 2 for g in goals)
        assert [g.id for g in goals] == ["goal-1", "goal-2", "goal-3", "goal-4"]

    def test_poc_with_buyer_skips_briefing(self, make_context):
        """An engaged economic buyer removes the conditional goal."""
        goals = generate_goals(make_context(roles=[ParticipantRole.ECONOMIC_BUYER]))

        titles = [g.title for g in goals]
        assert "Schedule executive briefing before POC ends" not in titles

    def test_unknown_stage_uses_generic_goal(self, make_context):
        """A stage with no template gets the status goal."""
        goals = generate_goals(make_context(deal_stage="unknown"))

        assert [g.title for g in goals] == ["Understand current status and next steps"]


class TestRiskGoals:
    """Goals raised from detected risks."""

    def test_high_risk_goal_sorts_first(self, make_context, now):
        """High risks become priority 1 goals ahead of stage goals."""
        context = make_context(
            risks=[
                _risk(
                    now, "risk-stale-comm", RiskSeverity.HIGH, "No contact in 20 days"
                )
            ]
        )

        goals = generate_goals(context)

        assert goals[0].title == "Address: No contact in 20 days"
        assert goals[0].priority == 1
        assert goals[0].related_risks == ["risk-stale-comm"]
        assert goals[0].suggested_approach == "Do something about it"

    def test_capped_at_five(self, make_context, now):
        """Lowest priority candidates fall off beyond the cap."""
        context = make_context(
            risks=[
                _risk(now, "r1", RiskSeverity.HIGH, "Stalled"),
                _risk(now, "r2", RiskSeverity.MEDIUM, "Thin coverage"),
            ]
        )

        goals = generate_goals(context)

        assert len(goals) == 5
        assert goals[0].title == "Address: Stalled"
        assert "Discuss: Thin coverage" not in [g.title for g in goals]
        assert [g.priority for g in goals] == sorted(g.priority for g in goals)


class TestActionItemGoals:
    """Goals raised from open action items."""

    def test_overdue_customer_items(self, make_context, now):
        """Overdue customer items produce one follow-up goal listing them."""
        items = [
            _item(now, "a", ActionItemOwner.THEIRS, ActionItemStatus.OVERDUE),
            _item(now, "b", ActionItemOwner.THEIRS, ActionItemStatus.OVERDUE),
            _item(now, "c", ActionItemOwner.THEIRS, ActionItemStatus.PENDING),
        ]

        goals = generate_goals(make_context(deal_stage="unknown", action_items=items))

        follow_up = goals[0]
        assert follow_up.title == "Follow up on overdue customer action items"
        assert follow_up.rationale == "2 items are past due: Task a; Task b"
        assert follow_up.related_action_items == ["a", "b"]
        titles = [g.title for g in goals]
        assert "Check status on pending customer items" not in titles

    def test_pending_customer_items(self, make_context, now):
        """Pending customer items without overdue ones get a status check."""
        items = [_item(now, "a", ActionItemOwner.THEIRS, ActionItemStatus.PENDING)]

        goals = generate_goals(make_context(deal_stage="unknown", action_items=items))

        assert goals[-1].title == "Check status on pending customer items"
        assert goals[-1].priority == 3

    def test_our_overdue_items(self, make_context, now):
        """Our overdue items get a delivery goal; completed ones are ignored."""
        items = [
            _item(now, "a", ActionItemOwner.OURS, ActionItemStatus.OVERDUE),
            _item(now, "b", ActionItemOwner.OURS, ActionItemStatus.COMPLETED),
        ]

        goals = generate_goals(make_context(deal_stage="unknown", action_items=items))

        ours = next(g for g in goals if g.title == "Deliver on our overdue commitments")
        assert ours.related_action_items == ["a"]


class TestStakeholderGoals:
    """Goals raised from the buying group."""

    def test_missing_buyer_with_broad_team(self, make_context):
        """Three or more contacts without a buyer asks for an intro."""
        roles = [ParticipantRole.UNKNOWN] * 3
        goals = generate_goals(make_context(deal_stage="unknown", roles=roles))

        assert "Get introduction to economic buyer" in [g.title for g in goals]

    def test_blocker_and_champion(self, make_context):
        """Blockers and champions each add a goal."""
        roles = [ParticipantRole.BLOCKER, ParticipantRole.CHAMPION]
        goals = generate_goals(make_context(deal_stage="unknown", roles=roles))

        assert [g.title for g in goals] == [
            "Understand current status and next steps",
            "Address concerns of skeptical stakeholders",
            "Equip champion with internal selling points",
        ]
        assert goals[1].rationale == "1 potential blocker(s) identified"


class TestDeduplication:
    """Tests for deduplicate_goals and get_top_goals."""

    def test_same_prefix_keeps_first(self):
        """Titles sharing their first 30 characters collapse."""
        goals = [
            Goal(
                id="g1",
                priority=2,
                title="Confirm POC success criteria are on track",
                rationale="a",
            ),
            Goal(
                id="g2",
                priority=1,
                title="Confirm POC success criteria ARE slipping",
                rationale="b",
            ),
            Goal(id="g3", priority=3, title="Verify procurement timeline", rationale="c"),
        ]

        assert [g.id for g in deduplicate_goals(goals)] == ["g1", "g3"]

    def test_top_goals(self, make_context):
        """Top goals is a prefix of the ranked list."""
        goals = generate_goals(make_context())
        assert get_top_goals(goals, 2) == goals[:2]
