"""Pydantic models for raw export rows and computed metric tables.

Raw records keep every field as the exported string; parsing happens inside
the aggregation pipelines. Output models are frozen value objects rebuilt on
every aggregation call.
"""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

Granularity = Literal["weekly", "monthly"]


# =========================================================
# RAW RECORDS
# =========================================================

class RawUserRecord(BaseModel):
    """Signup event as exported by the product database.

    Attributes:
        created_at: Creation timestamp (`dd/mm/yyyy`).
        value: Validation marker; the OAuth sentinel identifies Google signups.
        utm_medium: UTM medium tag.
        utm_campaign: UTM campaign tag.
        profession: Free-text profession.
        username: Identity key (email) shared with transactions.
        form_fields: Remaining columns, read by the form validator.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)
    created_at: str = ""
    value: str = ""
    utm_medium: str = ""
    utm_campaign: str = ""
    profession: str = ""
    username: str = ""
    form_fields: dict[str, str] = Field(default_factory=dict)


class RawTransactionRecord(BaseModel):
    """Payment event."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    username: str = ""
    transacted_at: str = ""
    amount: str = ""
    plan: str = ""


class RawEmailCampaignRecord(BaseModel):
    """One sent campaign from the email platform export."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    sent_at: str = ""
    name: str = ""
    subject: str = ""
    sent: str = ""
    delivered: str = ""
    open_rate: str = ""
    ctor: str = ""
    unsubscribe_rate: str = ""


class RawScoringRecord(BaseModel):
    """One scored lead from the lead-scoring export."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    email: str = ""
    created_at: str = ""
    score: str = ""
    plan: str = ""
    source: str = ""
    medium: str = ""
    profession: str = ""


class RawDataset(BaseModel):
    """The four record collections for one computation cycle."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    users: list[RawUserRecord] = Field(default_factory=list)
    transactions: list[RawTransactionRecord] = Field(default_factory=list)
    emails: list[RawEmailCampaignRecord] = Field(default_factory=list)
    scoring: list[RawScoringRecord] = Field(default_factory=list)


# =========================================================
# PERIODS & SHARED VALUES
# =========================================================

class Period(BaseModel):
    """Inclusive date window used for period-over-period comparison."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    label: str
    start: date
    end: date

    @model_validator(mode="after")
    def _check_bounds(self) -> "Period":
        if self.start > self.end:
            raise ValueError("period start must not be after its end")
        return self

    def contains(self, day: Optional[date]) -> bool:
        return day is not None and self.start <= day <= self.end

    def days(self) -> list[date]:
        return [date.fromordinal(n) for n in range(self.start.toordinal(), self.end.toordinal() + 1)]


class ScoreStats(BaseModel):
    """Mean and median rounded to two decimals."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    mean: float = 0.0
    median: float = 0.0


class Comparison(BaseModel):
    """A current/previous pair with its percentage variation."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    current: float
    previous: float
    variation: float


# =========================================================
# ACQUISITION
# =========================================================

class AcquisitionScorecard(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    total: int = Field(..., ge=0)
    valid: int = Field(..., ge=0)
    valid_rate: float
    var_valid: float
    prev_total: int = Field(..., ge=0)
    prev_valid: int = Field(..., ge=0)


class ValidationBreakdownRow(BaseModel):
    """google / form-valid / form-invalid split for one period."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    label: str
    google: int = Field(..., ge=0)
    form_valid: int = Field(..., ge=0)
    form_invalid: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    form_rate: float
    total_rate: float


class ChannelRow(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    medium: str
    current: int = Field(..., ge=0)
    previous: int = Field(..., ge=0)


class EfficiencyRow(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    medium: str
    current_rate: float
    previous_rate: float
    volume: int = Field(..., ge=0)


class ChannelTables(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    all_valid: list[ChannelRow] = Field(default_factory=list)
    oauth: list[ChannelRow] = Field(default_factory=list)
    efficiency: list[EfficiencyRow] = Field(default_factory=list)


# =========================================================
# ENTITY HEATMAP
# =========================================================

class AggregatedRow(BaseModel):
    """Heatmap row: current total, previous total, per-day counts."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    name: str
    total: int = Field(..., ge=0)
    prev: int = Field(..., ge=0)
    daily: list[int]

    @model_validator(mode="after")
    def _check_daily(self) -> "AggregatedRow":
        if sum(self.daily) != self.total:
            raise ValueError("daily counts must add up to the current total")
        return self

    @property
    def growth(self) -> int:
        return self.total - self.prev


class EntityHeatmap(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    rows: list[AggregatedRow] = Field(default_factory=list)
    top_volume: Optional[AggregatedRow] = None
    top_growth: Optional[AggregatedRow] = None
    top_drop: Optional[AggregatedRow] = None
    max_daily: int = 1


class EntityMetrics(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    dates: list[date]
    profession: EntityHeatmap
    campaign: EntityHeatmap


# =========================================================
# CONVERSION
# =========================================================

class PlanRevenueRow(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    plan: str
    quantity: int = Field(..., ge=0)
    revenue: float


class OriginRevenueRow(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    origin: str
    quantity: int = Field(..., ge=0)
    revenue: float
    plan_mix: str


class ConversionSummary(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    count: int = Field(0, ge=0)
    total_revenue: float = 0.0
    avg_ticket: float = 0.0
    avg_days: float = 0.0
    by_plan: list[PlanRevenueRow] = Field(default_factory=list)
    by_origin: list[OriginRevenueRow] = Field(default_factory=list)


class SpeedCohortRow(BaseModel):
    """Conversion speed of the leads created within one period."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    label: str
    lead_volume: int = Field(..., ge=0)
    conversions: int = Field(..., ge=0)
    within_7: int = Field(..., ge=0)
    within_30: int = Field(..., ge=0)
    perc_7: float
    perc_30: float
    daily_speed: list[int] = Field(..., min_length=31, max_length=31)


class ConversionSpeed(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    rows: list[SpeedCohortRow] = Field(default_factory=list)
    max_cell: int = 1


# =========================================================
# EMAIL
# =========================================================

class EmailStats(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    campaigns: int = 0
    sent: int = 0
    delivered: int = 0
    open_rate: float = 0.0
    ctor: float = 0.0
    unsub_rate: float = 0.0
    unsub_count: int = 0


class EmailTrendRow(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    label: str
    stats: EmailStats


class CampaignRow(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    sent_on: date
    name: str
    subject: str
    sent: int
    delivered: int
    delivery_rate: float
    open_rate: float
    ctor: float
    unsub_rate: float
    unsubscribes: int


class EmailScorecard(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    campaigns: Comparison
    sent: Comparison
    open_rate: Comparison
    ctor: Comparison
    unsubscribes: Comparison
    unsub_rate: float


class EmailMetrics(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    scorecard: EmailScorecard
    trend: list[EmailTrendRow]
    campaigns: list[CampaignRow]


# =========================================================
# LEAD SCORING
# =========================================================

class ScoreBucket(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    label: str
    current: int = Field(..., ge=0)
    current_pct: float
    previous_pct: float


class ScoringPlanRow(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    plan: str
    volume: int = Field(..., ge=0)
    mean_current: float
    mean_previous: float
    avg_days: Optional[float] = None


class ScoringGroupRow(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    name: str
    volume: int = Field(..., ge=0)
    mean_current: float
    mean_previous: float


class ScoringMetrics(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    current_label: str
    previous_label: str
    total_current: int = Field(..., ge=0)
    total_previous: int = Field(..., ge=0)
    mean: Comparison
    median: Comparison
    qualified_rate: Comparison
    distribution: list[ScoreBucket]
    plans: list[ScoringPlanRow]
    origins: list[ScoringGroupRow]
    professions: list[ScoringGroupRow]


# =========================================================
# REPORT
# =========================================================

class DashboardReport(BaseModel):
    """Every metric table computed for one reference date and granularity."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    granularity: Granularity
    periods: list[Period]
    scoring_periods: list[Period]
    acquisition: Optional[AcquisitionScorecard] = None
    validation: list[ValidationBreakdownRow] = Field(default_factory=list)
    channels: ChannelTables = Field(default_factory=ChannelTables)
    entities: Optional[EntityMetrics] = None
    conversion: Optional[ConversionSummary] = None
    speed: ConversionSpeed = Field(default_factory=ConversionSpeed)
    email: Optional[EmailMetrics] = None
    scoring: Optional[ScoringMetrics] = None
