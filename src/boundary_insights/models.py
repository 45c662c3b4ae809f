"""
Pydantic models and schemas for the analytics engine.

This module defines the event records the engine consumes, the derived
records it produces, and the input/output shapes of the MCP tools. Record
models are frozen: once logged (or derived) they are never mutated.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# Enumerations


class FlagType(str, Enum):
    GREEN = "green"
    RED = "red"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


class Reaction(str, Enum):
    """How the other person reacted when a boundary was set."""

    ACCEPTED = "accepted"
    PUSHED_BACK = "pushed-back"
    ANGRY = "angry"
    GUILT_TRIPPED = "guilt-tripped"
    SILENT_TREATMENT = "silent-treatment"
    RESPECT_SHOWN = "respect-shown"


class TriggerCategory(str, Enum):
    TOPIC = "topic"
    LOCATION = "location"
    TIME = "time"
    PEOPLE = "people"
    BEHAVIOR = "behavior"
    EMOTIONAL_STATE = "emotional-state"


class InsightType(str, Enum):
    TREND = "trend"
    WARNING = "warning"
    CYCLE = "cycle"
    IMPROVEMENT = "improvement"
    TRIGGER = "trigger"


class AlertType(str, Enum):
    PATTERN = "pattern"
    ESCALATION = "escalation"
    CONTEXT = "context"
    RECOVERY = "recovery"
    BOUNDARY = "boundary"


class AnalysisWindow(str, Enum):
    """Recency windows ending at the reference time."""

    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"


WINDOW_DAYS = {
    AnalysisWindow.WEEK: 7,
    AnalysisWindow.MONTH: 30,
    AnalysisWindow.QUARTER: 90,
}


# Event records (read-only to the engine)


class InteractionEvent(BaseModel):
    """A logged interaction, flagged green or red."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    relationship_id: str = Field(default="", description="Reference to the relationship")
    flag_type: FlagType
    category: str = Field(default="General")
    severity: Severity = Field(default=Severity.LOW)
    energy_before: int = Field(default=5, ge=1, le=10)
    energy_after: int = Field(default=5, ge=1, le=10)
    location: str = Field(default="")
    time_of_day: Optional[TimeOfDay] = None
    boundary_tested: Optional[bool] = None

    # Optional context used by the context detector and compatibility scoring
    id: Optional[str] = None
    witnesses: str = Field(default="")
    topic: Optional[str] = None
    communication_style: Optional[str] = None
    validation_received: Optional[List[str]] = None
    triggers_encountered: Optional[List[str]] = None

    @property
    def is_red(self) -> bool:
        return self.flag_type == FlagType.RED

    @property
    def energy_delta(self) -> int:
        return self.energy_after - self.energy_before


class BoundaryEvent(BaseModel):
    """A boundary the user asserted, paired with the counterpart's reaction."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    relationship_id: str = Field(default="")
    boundary_type: str = Field(description="Boundary category, e.g. said-no, set-limit")
    description: str = Field(default="")
    severity: Severity = Field(default=Severity.MEDIUM)
    reaction: Reaction


class TriggerObservation(BaseModel):
    """One occurrence of a recurring trigger."""

    model_config = ConfigDict(frozen=True)

    trigger: str = Field(min_length=1, description="Free-text trigger label")
    category: TriggerCategory = Field(default=TriggerCategory.TOPIC)
    boundary_violated: bool = False
    severity: int = Field(default=5, ge=1, le=10)
    contextual_factors: List[str] = Field(default_factory=list)
    user_reaction: Optional[str] = None
    effective_response: Optional[str] = None
    timestamp: datetime
    relationship_id: Optional[str] = None


class BaselineProfile(BaseModel):
    """Self-reported communication, validation and trigger preferences."""

    model_config = ConfigDict(frozen=True)

    communication_styles: Optional[List[str]] = Field(
        default=None, description="Preferred communication styles, best first"
    )
    validation_types: Optional[List[str]] = Field(
        default=None, description="Validation types the user needs"
    )
    known_triggers: Optional[List[str]] = Field(default=None, description="Known triggers")


class SituationalContext(BaseModel):
    """What the user is about to walk into."""

    model_config = ConfigDict(frozen=True)

    location: Optional[str] = None
    topic: Optional[str] = None
    others: List[str] = Field(default_factory=list)
    planned_meeting: bool = False


# Derived records


class PatternInsight(BaseModel):
    """A ranked explanation of a detected behavioral pattern."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: InsightType
    severity: Severity
    confidence: int = Field(ge=0, le=100)
    title: str
    description: str
    actionable: bool = True
    recommendations: List[str] = Field(default_factory=list)
    supporting_data: List[str] = Field(default_factory=list)


class WarningAlert(BaseModel):
    """A situational, dismissible warning ahead of an interaction."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: AlertType
    severity: AlertSeverity
    confidence: int = Field(ge=0, le=100)
    title: str
    description: str
    triggers: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    suggested_phrases: Optional[List[str]] = None
    exit_strategies: Optional[List[str]] = None
    timeframe: str = ""


class WarningReport(BaseModel):
    """Warnings plus an explicit status for the empty case."""

    status: str = Field(description="'alerts' or 'no_immediate_concerns'")
    message: str
    alerts: List[WarningAlert] = Field(default_factory=list)
    dismissed_count: int = 0


class CompatibilityBreakdown(BaseModel):
    """Per-interaction compatibility against the baseline profile."""

    communication_alignment: float
    validation_match: float
    trigger_impact: float
    overall: int = Field(ge=0, le=100)


class TriggerPatternSummary(BaseModel):
    """Output projection of one trigger's aggregate statistics."""

    trigger: str
    category: TriggerCategory
    occurrences: int
    violations: int
    violation_rate: float = Field(ge=0, le=100)
    average_severity: float
    high_risk: bool
    improving: bool
    contextual_factors: Dict[str, int] = Field(default_factory=dict)
    user_reactions: Dict[str, int] = Field(default_factory=dict)
    effective_responses: Dict[str, int] = Field(default_factory=dict)
    last_seen: Optional[datetime] = None


class TriggerReport(BaseModel):
    total_triggers: int
    average_violation_rate: float
    most_problematic: List[TriggerPatternSummary] = Field(default_factory=list)
    high_risk: List[str] = Field(default_factory=list)
    improving: List[str] = Field(default_factory=list)
    patterns: List[TriggerPatternSummary] = Field(default_factory=list)


class TimeBucket(BaseModel):
    """Violation statistics for one time, weekday, hour or location key."""

    key: str
    total: int
    violations: int
    violation_rate: float
    average_health: float
    average_energy: float


class LocationBucket(TimeBucket):
    pass


class WeekTrend(BaseModel):
    week_start: str
    total: int
    violation_rate: float
    average_health: float
    average_energy: float


class TimeRiskReport(BaseModel):
    time_of_day: List[TimeBucket] = Field(default_factory=list)
    day_of_week: List[TimeBucket] = Field(default_factory=list)
    hourly: List[TimeBucket] = Field(default_factory=list)
    locations: List[LocationBucket] = Field(default_factory=list)
    weekly_trend: List[WeekTrend] = Field(default_factory=list)
    recent_trend: str = "stable"
    trend_slope: float = 0.0
    riskiest_time: Optional[str] = None
    safest_time: Optional[str] = None
    riskiest_day: Optional[str] = None
    riskiest_location: Optional[str] = None


class ReactionShare(BaseModel):
    reaction: Reaction
    count: int
    percentage: int


class BoundaryReport(BaseModel):
    total_events: int
    reactions: List[ReactionShare] = Field(default_factory=list)
    respect_rate: float = 0.0
    pushback_rate: float = 0.0
    most_common_reaction: Optional[Reaction] = None
    by_boundary_type: Dict[str, Dict[str, int]] = Field(default_factory=dict)


class AnalyticsResult(BaseModel):
    """Everything one analysis pass derives for a relationship."""

    relationship_id: str
    reference_time: Optional[datetime] = None
    window: AnalysisWindow
    interactions_analyzed: int
    health_score: int = Field(ge=0, le=100)
    health_category: str
    compatibility: Optional[CompatibilityBreakdown] = None
    insights: List[PatternInsight] = Field(default_factory=list)
    trigger_report: TriggerReport
    time_report: TimeRiskReport
    boundary_report: BoundaryReport
    warnings: WarningReport
    skipped_records: Dict[str, int] = Field(default_factory=dict)


# Tool input models


class AnalyticsInput(BaseModel):
    """Input for the compute analytics tool."""

    interactions: List[Any] = Field(default_factory=list)
    boundaries: List[Any] = Field(default_factory=list)
    triggers: List[Any] = Field(default_factory=list)
    baseline: Optional[Dict[str, Any]] = None
    context: Optional[Dict[str, Any]] = None
    dismissed: List[str] = Field(default_factory=list)
    now: Optional[datetime] = Field(default=None, description="Reference time for recency")
    window: AnalysisWindow = Field(default=AnalysisWindow.MONTH)
    redact: bool = Field(default=True, description="Hash relationship references")


class RelationshipBatchInput(BaseModel):
    """Input for the multi-relationship comparison tool."""

    relationships: Dict[str, Dict[str, Any]] = Field(
        description="Relationship id -> AnalyticsInput-shaped payload"
    )
    window: AnalysisWindow = Field(default=AnalysisWindow.MONTH)
    redact: bool = Field(default=True)
