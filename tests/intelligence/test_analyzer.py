"""Tests for the account analyzer."""

from datetime import UTC, datetime, timedelta

import pytest

from account_intel.intelligence.analyzer import (
    analyze_account,
    analyze_timeline,
    apply_analysis_to_account,
    calculate_days_since_contact,
    calculate_engagement_velocity,
    calculate_health_score,
    calculate_momentum_score,
    categorize_momentum,
    detect_risks,
)
from account_intel.intelligence.errors import PipelineInputError
from account_intel.intelligence.merger import merge_all_data
from account_intel.intelligence.schemas import (
    EngagementVelocity,
    MergeOptions,
    TimelineTrend,
)
from account_intel.models.account import (
    ActionItem,
    ActionItemOwner,
    ActionItemStatus,
    Momentum,
    Risk,
    RiskSeverity,
    RiskType,
    TimelineEvent,
    TimelineEventType,
)
from account_intel.models.participant import Participant, ParticipantRole


@pytest.fixture
def options() -> MergeOptions:
    """Merge options for the Toyota account."""
    return MergeOptions(
        account_name="Toyota",
        account_domain="toyota.com",
        internal_domains=["runlayer.com"],
    )


def _participants(*roles: ParticipantRole) -> dict[str, Participant]:
    return {
        f"p{n}@toyota.com": Participant(email=f"p{n}@toyota.com", role=role)
        for n, role in enumerate(roles)
    }


def _overdue(owner: ActionItemOwner, count: int, now: datetime) -> list[ActionItem]:
    return [
        ActionItem(
            id=f"{owner.value}-{n}",
            description="Overdue thing",
            owner=owner,
            created_date=now - timedelta(days=20),
            status=ActionItemStatus.OVERDUE,
            days_overdue=5,
        )
        for n in range(count)
    ]


def _event(now: datetime, days_ago: float, kind=TimelineEventType.CALL, **kwargs):
    return TimelineEvent(
        id=f"ev-{days_ago}",
        date=now - timedelta(days=days_ago),
        kind=kind,
        **kwargs,
    )


class TestEmptyAccount:
    """All three source collections empty."""

    def test_sentinels_and_at_risk(self, options, now):
        """No contact yields the sentinel, at-risk momentum and two risks."""
        merged = merge_all_data([], [], [], options, now=now)

        analysis = analyze_account(merged, now=now)

        assert analysis.days_since_last_contact == 999
        assert analysis.momentum == Momentum.AT_RISK
        assert analysis.momentum_score == 0
        assert analysis.health_score == 0
        assert analysis.engagement_velocity == EngagementVelocity.LOW
        assert [(r.id, r.severity) for r in analysis.risks] == [
            ("risk-stale-comm", RiskSeverity.HIGH),
            ("risk-single-thread", RiskSeverity.MEDIUM),
        ]

    def test_insights_for_empty_account(self, options, now):
        """Momentum insight comes first, then high-risk actions."""
        merged = merge_all_data([], [], [], options, now=now)

        analysis = analyze_account(merged, now=now)

        assert analysis.insights == [
            "Deal at risk - immediate action needed",
            "Action needed: Schedule a check-in call or send an update",
        ]


class TestMomentumScore:
    """Tests for calculate_momentum_score."""

    @pytest.mark.parametrize(
        "days,participants,calls,ours,theirs,expected",
        [
            (1, 5, 2, 0, 0, 100),
            (10, 3, 1, 0, 0, 65),
            (20, 2, 0, 0, 0, 30),
            (31, 0, 0, 0, 0, 0),
            (5, 2, 0, 2, 1, 47),
        ],
    )
    def test_applies_deltas(self, days, participants, calls, ours, theirs, expected):
        """Each rule adds its fixed delta to the base score."""
        score = calculate_momentum_score(
            days_since_contact=days,
            participant_count=participants,
            recent_calls=calls,
            overdue_ours=ours,
            overdue_theirs=theirs,
        )
        assert score == expected

    def test_dormant_penalty_applies_beyond_thirty_days(self):
        """Long silence costs more than moderate silence."""
        stale = calculate_momentum_score(20, 2, 0, 0, 0)
        dormant = calculate_momentum_score(45, 2, 0, 0, 0)
        assert stale - dormant == 20

    def test_score_is_clamped(self):
        """Scores never leave 0 to 100."""
        assert calculate_momentum_score(1, 10, 10, 0, 0) == 100
        assert calculate_momentum_score(999, 0, 0, 20, 20) == 0


class TestCategorizeMomentum:
    """Tests for categorize_momentum thresholds."""

    @pytest.mark.parametrize(
        "score,expected",
        [
            (100, Momentum.ACCELERATING),
            (70, Momentum.ACCELERATING),
            (69, Momentum.STABLE),
            (50, Momentum.STABLE),
            (49, Momentum.STALLING),
            (30, Momentum.STALLING),
            (29, Momentum.AT_RISK),
            (0, Momentum.AT_RISK),
        ],
    )
    def test_thresholds(self, score, expected):
        """Category is fixed by the score."""
        assert categorize_momentum(score) == expected


class TestDetectRisks:
    """Tests for detect_risks."""

    def test_recent_contact_with_broad_team_has_no_risks(self, now):
        """Healthy accounts trigger nothing."""
        participants = _participants(
            ParticipantRole.CHAMPION,
            ParticipantRole.ECONOMIC_BUYER,
            ParticipantRole.UNKNOWN,
        )

        assert detect_risks(3, 10, participants, [], now) == []

    @pytest.mark.parametrize(
        "days,severity",
        [
            (8, RiskSeverity.MEDIUM),
            (14, RiskSeverity.MEDIUM),
            (15, RiskSeverity.HIGH),
        ],
    )
    def test_stale_communication(self, days, severity, now):
        """Silence over a week is medium, over two weeks high."""
        risks = detect_risks(days, 0, _participants(ParticipantRole.CHAMPION), [], now)

        stale = next(r for r in risks if r.id == "risk-stale-comm")
        assert stale.severity == severity
        assert stale.description == f"No contact in {days} days"
        assert stale.type == RiskType.TIMELINE

    def test_stuck_in_stage(self, now):
        """Long stage tenure is flagged by severity."""
        medium = detect_risks(0, 45, {}, [], now)
        high = detect_risks(0, 61, {}, [], now)

        assert [r.severity for r in medium if r.id == "risk-stuck-stage"] == [
            RiskSeverity.MEDIUM
        ]
        assert [r.severity for r in high if r.id == "risk-stuck-stage"] == [
            RiskSeverity.HIGH
        ]

    def test_missing_roles_with_broad_team(self, now):
        """Three participants without champion or buyer raise both risks."""
        participants = _participants(*[ParticipantRole.UNKNOWN] * 3)

        risks = {r.id: r for r in detect_risks(0, 0, participants, [], now)}

        assert "risk-single-thread" not in risks
        assert risks["risk-no-champion"].severity == RiskSeverity.MEDIUM
        assert risks["risk-no-buyer"].severity == RiskSeverity.HIGH

    def test_no_champion_needs_participants(self, now):
        """With nobody engaged only the single-thread risk fires."""
        ids = [r.id for r in detect_risks(0, 0, {}, [], now)]
        assert ids == ["risk-single-thread"]

    def test_overdue_items_by_side(self, now):
        """More than two overdue items on a side is high severity."""
        items = _overdue(ActionItemOwner.OURS, 3, now) + _overdue(
            ActionItemOwner.THEIRS, 2, now
        )
        participants = _participants(
            ParticipantRole.CHAMPION,
            ParticipantRole.ECONOMIC_BUYER,
            ParticipantRole.UNKNOWN,
        )

        risks = {r.id: r for r in detect_risks(0, 0, participants, items, now)}

        assert risks["risk-overdue-ours"].severity == RiskSeverity.HIGH
        assert risks["risk-overdue-ours"].description == (
            "3 overdue action items on our side"
        )
        assert risks["risk-overdue-theirs"].severity == RiskSeverity.MEDIUM
        assert risks["risk-overdue-ours"].type == RiskType.TIMELINE
        assert risks["risk-overdue-theirs"].type == RiskType.TIMELINE


class TestHealthScore:
    """Tests for calculate_health_score."""

    def test_subtracts_risk_and_overdue_penalties(self, now):
        """High, medium and overdue penalties are applied to momentum."""
        risks = [
            Risk(
                id="a",
                type=RiskType.OTHER,
                severity=RiskSeverity.HIGH,
                description="a",
                detected_date=now,
            ),
            Risk(
                id="b",
                type=RiskType.OTHER,
                severity=RiskSeverity.MEDIUM,
                description="b",
                detected_date=now,
            ),
        ]
        items = _overdue(ActionItemOwner.OURS, 2, now)

        assert calculate_health_score(80, risks, items) == 80 - 15 - 5 - 6

    def test_never_negative(self, now):
        """Health is clamped at zero."""
        assert calculate_health_score(5, [], _overdue(ActionItemOwner.OURS, 5, now)) == 0


class TestAnalyzeAccount:
    """Tests for analyze_account end to end."""

    def test_recent_call_with_one_participant(self, make_call, options, now):
        """A call two days ago with one external is stable momentum."""
        merged = merge_all_data([make_call(days_ago=2)], [], [], options, now=now)

        analysis = analyze_account(merged, now=now)

        assert analysis.days_since_last_contact == 2
        assert analysis.momentum_score == 65
        assert analysis.momentum == Momentum.STABLE

    def test_stage_start_date_sets_days_in_stage(self, options, now):
        """An ISO stage start date is measured against now."""
        merged = merge_all_data([], [], [], options, now=now)

        analysis = analyze_account(merged, stage_start_date="2026-01-01", now=now)

        assert analysis.days_in_stage == 75
        assert any(r.id == "risk-stuck-stage" for r in analysis.risks)

    def test_unparsable_stage_start_date_raises(self, options, now):
        """A malformed explicit date names the stage and field."""
        merged = merge_all_data([], [], [], options, now=now)

        with pytest.raises(PipelineInputError) as exc_info:
            analyze_account(merged, stage_start_date="last spring", now=now)

        assert exc_info.value.stage == "account_analyzer"
        assert exc_info.value.field == "stage_start_date"

    def test_apply_analysis_returns_updated_copy(self, make_call, options, now):
        """The merged account is not modified in place."""
        merged = merge_all_data([], [], [], options, now=now)
        analysis = analyze_account(merged, now=now)

        account = apply_analysis_to_account(merged.account, analysis)

        assert account.momentum == Momentum.AT_RISK
        assert len(account.risks) == 2
        assert merged.account.momentum == Momentum.STABLE
        assert merged.account.risks == []


class TestTimelineHelpers:
    """Tests for timeline statistics."""

    def test_days_since_contact_uses_latest_event(self, now):
        """The newest event sets recency, rounded up to whole days."""
        timeline = [_event(now, 10), _event(now, 1.5)]
        assert calculate_days_since_contact(timeline, now) == 2

    def test_velocity_buckets(self, now):
        """Events per week over 30 days bucket into high, medium and low."""
        busy = [_event(now, d) for d in range(0, 30, 3)]
        quiet = [_event(now, 5), _event(now, 20), _event(now, 25)]

        assert calculate_engagement_velocity(busy, now) == EngagementVelocity.HIGH
        assert calculate_engagement_velocity(quiet, now) == EngagementVelocity.MEDIUM
        assert calculate_engagement_velocity([], now) == EngagementVelocity.LOW

    def test_analyze_timeline(self, now):
        """Cadence, gaps and trend over a two week span."""
        start = datetime(2026, 3, 1, tzinfo=UTC)
        timeline = [
            TimelineEvent(
                id=f"call-{n}",
                date=start + timedelta(days=offset),
                kind=TimelineEventType.CALL,
                duration_minutes=duration,
            )
            for n, (offset, duration) in enumerate(
                [(0, 30), (10, 60), (12, 30), (14, 60)]
            )
        ]

        stats = analyze_timeline(timeline, now)

        assert stats.total_events == 4
        assert stats.average_call_duration == 45.0
        assert stats.call_frequency_per_week == 0.93
        assert stats.longest_gap_days == 10
        assert stats.recent_trend == TimelineTrend.INCREASING

    def test_call_frequency_uses_trailing_window(self, now):
        """Old calls count toward duration but not weekly frequency."""
        timeline = [
            TimelineEvent(
                id="call-old",
                date=now - timedelta(days=40),
                kind=TimelineEventType.CALL,
            ),
            TimelineEvent(
                id="call-recent",
                date=now - timedelta(days=2),
                kind=TimelineEventType.CALL,
                duration_minutes=60,
            ),
        ]

        stats = analyze_timeline(timeline, now)

        assert stats.average_call_duration == 30.0
        assert stats.call_frequency_per_week == 0.23

    def test_analyze_empty_timeline(self):
        """No events gives zeroed statistics."""
        stats = analyze_timeline([])
        assert stats.total_events == 0
        assert stats.recent_trend == TimelineTrend.STABLE
