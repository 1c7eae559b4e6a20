"""Tests for the talking point generator."""

from datetime import timedelta

import pytest

from account_intel.intelligence.schemas import (
    AccountAnalysis,
    EngagementVelocity,
    Goal,
    MergedData,
    TalkingPointCategory,
    TalkingPointContext,
)
from account_intel.intelligence.talking_points import (
    generate_talking_points,
    get_talking_points_by_category,
    get_top_talking_points,
)
from account_intel.models.account import (
    Account,
    Momentum,
    Risk,
    RiskSeverity,
    RiskType,
    TimelineEvent,
    TimelineEventType,
)
from account_intel.models.participant import ParticipantProfile, ParticipantRole


@pytest.fixture
def make_context(now):
    """Factory for talking point contexts around the Toyota account."""

    def _make(
        deal_stage: str = "unknown",
        momentum: Momentum = Momentum.STABLE,
        days_since_contact: int = 20,
        risks: list[Risk] | None = None,
        goals: list[Goal] | None = None,
        profiles: list[ParticipantProfile] | None = None,
        timeline: list[TimelineEvent] | None = None,
    ) -> TalkingPointContext:
        account = Account(
            id="toyota.com", name="Toyota", domain="toyota.com", deal_stage=deal_stage
        )
        analysis = AccountAnalysis(
            momentum=momentum,
            momentum_score=60,
            engagement_velocity=EngagementVelocity.MEDIUM,
            days_in_stage=0,
            days_since_last_contact=days_since_contact,
            risks=risks or [],
            health_score=60,
        )
        merged = MergedData(
            account=account, participants={}, timeline=timeline or [], action_items=[]
        )
        return TalkingPointContext(
            account=account,
            analysis=analysis,
            participants={p.email: p for p in profiles or []},
            merged=merged,
            goals=goals or [],
        )

    return _make


class TestBaseline:
    """A quiet account with no other signals."""

    def test_only_next_steps(self, make_context):
        """The generic next step and the cadence reminder are always there."""
        points = generate_talking_points(make_context())

        assert [p.point for p in points] == [
            "Propose specific next step with timeline",
            "Establish regular touchpoint cadence",
        ]
        assert points[1].context == "20 days since last contact"
        assert [p.id for p in points] == ["tp-1", "tp-2"]

    def test_sorted_by_priority_with_unique_ids(self, make_context, now):
        """Output is priority ordered and ids never repeat."""
        context = make_context(
            deal_stage="POC",
            momentum=Momentum.AT_RISK,
            risks=[
                Risk(
                    id="risk-stale-comm",
                    type=RiskType.TIMELINE,
                    severity=RiskSeverity.HIGH,
                    description="No contact in 20 days",
                    detected_date=now,
                )
            ],
        )

        points = generate_talking_points(context)

        priorities = [p.priority for p in points]
        assert priorities == sorted(priorities)
        assert len({p.id for p in points}) == len(points)


class TestOpeners:
    """Opener rules."""

    def test_recent_call_is_referenced(self, make_context, now):
        """A touchpoint within two weeks becomes the first opener."""
        call = TimelineEvent(
            id="call-c1",
            date=now - timedelta(days=3),
            kind=TimelineEventType.CALL,
            title="Security review",
        )

        points = generate_talking_points(
            make_context(days_since_contact=3, timeline=[call])
        )

        opener = points[0]
        assert opener.category == TalkingPointCategory.OPENER
        assert opener.point == "Reference last interaction: Security review"
        assert opener.context == "Last touchpoint was 3 days ago"
        assert opener.suggested_phrasing == (
            '"Great to reconnect - I wanted to follow up on our conversation '
            'from 3 days ago..."'
        )

    def test_stalling_account_re_engages(self, make_context):
        """Slowing momentum adds a re-engagement opener and value reminder."""
        points = generate_talking_points(make_context(momentum=Momentum.STALLING))

        by_point = {p.point: p for p in points}
        assert by_point["Re-establish engagement"].priority == 1
        assert by_point["Re-establish engagement"].context == (
            "Account momentum is stalling"
        )
        assert by_point["Re-emphasize core value proposition"].priority == 1

    def test_poc_stage_points(self, make_context):
        """Evaluation stages add a progress check, value recap and briefing ask."""
        points = generate_talking_points(make_context(deal_stage="POC"))

        titles = [p.point for p in points]
        assert "POC progress check" in titles
        assert "Reinforce value demonstrated in evaluation" in titles
        assert titles[0] == "Request executive briefing"


class TestRiskAndGoalPoints:
    """Points derived from risks and goals."""

    def test_risk_phrasing_is_keyed_by_rule(self, make_context, now):
        """High risks are addressed; low ones are skipped."""
        risks = [
            Risk(
                id="risk-single-thread",
                type=RiskType.STAKEHOLDER,
                severity=RiskSeverity.HIGH,
                description="Only one contact",
                detected_date=now,
                mitigation="Engage more people",
            ),
            Risk(
                id="risk-minor",
                type=RiskType.OTHER,
                severity=RiskSeverity.LOW,
                description="Minor",
                detected_date=now,
            ),
        ]

        points = generate_talking_points(make_context(risks=risks))

        [risk_point] = get_talking_points_by_category(
            points, TalkingPointCategory.RISK_MITIGATION
        )
        assert risk_point.point == "Address risk: Only one contact"
        assert risk_point.context == "Engage more people"
        assert risk_point.suggested_phrasing == (
            '"Who else on your team should we be engaging with?"'
        )

    def test_priority_one_goal_yields_two_points(self, make_context):
        """Top goals are stated and supported."""
        goal = Goal(
            id="goal-1",
            priority=1,
            title="Address: No contact in 20 days",
            rationale="High-severity risk",
            suggested_approach="Schedule a check-in",
        )

        points = generate_talking_points(make_context(goals=[goal]))

        support = get_talking_points_by_category(
            points, TalkingPointCategory.GOAL_SUPPORT
        )
        assert [(p.point, p.priority) for p in support] == [
            ("Address: No contact in 20 days", 1),
            ("Support: Address: No contact in 20 days", 2),
        ]
        assert support[0].suggested_phrasing == "Approach: Schedule a check-in"
        assert all(p.related_goal == "goal-1" for p in support)


class TestStakeholderPoints:
    """Points for individual stakeholders."""

    def test_champion_with_interests(self, make_context):
        """Role template and interests each give a point."""
        champion = ParticipantProfile(
            email="jane.doe@toyota.com",
            name="Jane Doe",
            role=ParticipantRole.CHAMPION,
            what_they_care_about=["Security", "Cost", "Timeline"],
        )

        points = generate_talking_points(make_context(profiles=[champion]))

        stakeholder = get_talking_points_by_category(
            points, TalkingPointCategory.STAKEHOLDER_SPECIFIC
        )
        assert [p.point for p in stakeholder] == [
            "Strengthen champion relationship with Jane Doe",
            "Address Jane Doe's priorities: Security and Cost",
        ]
        assert {p.related_participant for p in stakeholder} == {"jane.doe@toyota.com"}

    def test_unnamed_blocker_uses_email(self, make_context):
        """Without a name the email stands in."""
        blocker = ParticipantProfile(
            email="ken.sato@toyota.com", role=ParticipantRole.BLOCKER
        )

        points = generate_talking_points(make_context(profiles=[blocker]))

        assert points[0].point == "Address ken.sato@toyota.com's concerns directly"
        assert points[0].priority == 1


class TestHelpers:
    """Tests for list helpers."""

    def test_top_points(self, make_context):
        """Top points is a prefix of the sorted list."""
        points = generate_talking_points(make_context(deal_stage="POC"))
        assert get_top_talking_points(points, 2) == points[:2]
