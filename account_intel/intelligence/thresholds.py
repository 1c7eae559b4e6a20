"""Named thresholds for the account intelligence heuristics.

Every score delta, day cut-off and list limit used by the pipeline lives
here so rules can be tuned and tested in one place.
"""

# Sentinel for "never contacted"
NO_CONTACT_DAYS = 999

# Merger
CHAT_SIGNIFICANT_DAY_MESSAGES = 3

# Engagement velocity (events per week over the trailing window)
VELOCITY_WINDOW_DAYS = 30
VELOCITY_HIGH_PER_WEEK = 2.0
VELOCITY_MEDIUM_PER_WEEK = 0.5

# Momentum score
MOMENTUM_BASE = 50
MOMENTUM_MIN = 0
MOMENTUM_MAX = 100

RECENCY_VERY_RECENT_DAYS = 3
RECENCY_VERY_RECENT_DELTA = 20
RECENCY_RECENT_DAYS = 7
RECENCY_RECENT_DELTA = 10
RECENCY_STALE_DAYS = 14
RECENCY_STALE_DELTA = -20
RECENCY_DORMANT_DAYS = 30
RECENCY_DORMANT_DELTA = -40

STAKEHOLDERS_BROAD = 5
STAKEHOLDERS_BROAD_DELTA = 15
STAKEHOLDERS_HEALTHY = 3
STAKEHOLDERS_HEALTHY_DELTA = 10
STAKEHOLDERS_THIN = 2
STAKEHOLDERS_THIN_DELTA = -10

RECENT_CALL_WINDOW_DAYS = 14
RECENT_CALLS_MANY = 2
RECENT_CALLS_MANY_DELTA = 15
RECENT_CALLS_SOME = 1
RECENT_CALLS_SOME_DELTA = 5

OVERDUE_OURS_PENALTY = 5
OVERDUE_THEIRS_PENALTY = 3

MOMENTUM_ACCELERATING = 70
MOMENTUM_STABLE = 50
MOMENTUM_STALLING = 30

# Health score
HEALTH_HIGH_RISK_PENALTY = 15
HEALTH_MEDIUM_RISK_PENALTY = 5
HEALTH_OVERDUE_PENALTY = 3

# Risk rules
STALE_CONTACT_MEDIUM_DAYS = 7
STALE_CONTACT_HIGH_DAYS = 14
STUCK_STAGE_MEDIUM_DAYS = 30
STUCK_STAGE_HIGH_DAYS = 60
MULTITHREAD_MIN_PARTICIPANTS = 3
OVERDUE_HIGH_COUNT = 2
ECONOMIC_BUYER_MIN_PARTICIPANTS = 3

# Insights
MULTITHREAD_STRONG_PARTICIPANTS = 5
RECENT_ACTIVITY_WINDOW_DAYS = 7
RECENT_ACTIVITY_MIN_EVENTS = 3

# Timeline trend
TREND_INCREASING_RATIO = 1.5
TREND_DECREASING_RATIO = 0.5

# Profiler
INFLUENCE_HIGH_INTERACTIONS = 5
INFLUENCE_MEDIUM_INTERACTIONS = 2
ROLE_PARTIAL_CREDIT = 0.5
FREQUENT_CONTACT_INTERACTIONS = 5

# Goals
MAX_GOALS = 5
GOAL_DEDUPE_PREFIX = 30
OVERDUE_GOAL_LISTED_ITEMS = 3

# Talking points
OPENER_RECENT_DAYS = 14
GOAL_SUPPORT_TOP_GOALS = 3
CADENCE_GAP_DAYS = 14
CARES_ABOUT_TOPICS = 2

# Competitive intel
SENTIMENT_WINDOW_CHARS = 100
MENTION_CONTEXT_CHARS = 75
SIGNAL_CONTEXT_BEFORE = 50
SIGNAL_CONTEXT_AFTER = 100
THEME_PREFIX_CHARS = 50
MAX_THEMES = 5
POSITIVE_RATIO_HIGH = 0.5
POSITIVE_RATIO_MIN_MENTIONS = 2
RECENT_MENTION_WINDOW_DAYS = 30
RECENT_MENTIONS_MEDIUM = 3
LANDSCAPE_TOP_COMPETITORS = 3

# Assembler
DOSSIER_MAX_TALKING_POINTS = 7
DOSSIER_TALKING_POINT_MAX_PRIORITY = 2
SUMMARY_TOP_GOALS = 3
SUMMARY_GOAL_MAX_PRIORITY = 2
SUMMARY_RED_FLAGS = 3
INSIGHT_LIST_LIMIT = 3
RECENT_TOUCHPOINT_DAYS = 7
SECTION_MAX_COMPETITORS = 5
SECTION_MAX_MENTIONS = 5
SECTION_MENTION_PREVIEW_CHARS = 100
