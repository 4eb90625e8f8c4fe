"""Pydantic schemas for tariff lines, parsed rates, searches and estimates."""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, computed_field


RateType = Literal["advalorem", "specific", "compound"]


# ── Rate components ──────────────────────────────────────────────

class PercentageComponent(BaseModel):
    kind: Literal["percentage"] = "percentage"
    value: float = Field(..., ge=0)  # fraction of declared value, 0.05 = 5%


class SpecificComponent(BaseModel):
    kind: Literal["specific"] = "specific"
    value: float = Field(..., ge=0)  # USD
    per: str  # kg | pair | unit | dozen, or the raw unit when unrecognized


RateComponent = Annotated[
    Union[PercentageComponent, SpecificComponent],
    Field(discriminator="kind"),
]


class ParsedRate(BaseModel):
    rate_type: RateType
    components: list[RateComponent]
    raw: str


# ── Tariff lines ─────────────────────────────────────────────────

class NormalizedTariffItem(BaseModel):
    code10: str = Field(..., pattern=r"^\d{10}$")
    display_code: str
    description: str
    notes: Optional[str] = None
    rate_type: Optional[RateType] = None
    components: list[RateComponent] = []
    raw_rate_text: Optional[str] = None
    is_ten_digit: bool
    has_nesoi: bool
    source_url: str

    @computed_field
    @property
    def chapter(self) -> int:
        return int(self.code10[:2])


# ── Search ───────────────────────────────────────────────────────

class SearchOptions(BaseModel):
    limit: int = Field(default=50, ge=1)
    offset: int = Field(default=0, ge=0)
    ten_digit_only: bool = False
    chapter: Optional[int] = Field(default=None, ge=1, le=99)
    chapter_boosts: dict[int, float] = {}
    timeout_s: Optional[float] = Field(default=None, gt=0)
    fuzzy_edits_cap: Literal[0, 1] = 1


class SearchMeta(BaseModel):
    query: str
    expanded_queries: list[str] = []
    total_found: int = 0
    used_cache: bool = False
    degraded: bool = False
    warnings: list[str] = []


class SearchResult(BaseModel):
    items: list[NormalizedTariffItem]
    meta: SearchMeta


# ── Estimate / refine ────────────────────────────────────────────

Resolution = Literal["numeric", "hts", "dict", "none"]


class EstimateRequest(BaseModel):
    input: str
    price: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    country: str = "China"
    qty: Optional[float] = Field(default=None, allow_inf_nan=False)
    weight_kg: Optional[float] = Field(default=None, allow_inf_nan=False)


class EstimateLine(BaseModel):
    hs_code: Optional[str] = None
    hs_code_formatted: Optional[str] = None
    description: Optional[str] = None
    rate: Optional[float] = None  # first ad valorem fraction, "Free" => 0
    rate_type: Optional[RateType] = None


class EstimateBreakdown(EstimateLine):
    product: str
    country: str
    price: float
    qty: Optional[float] = None
    weight_kg: Optional[float] = None


class EstimateResult(BaseModel):
    duty: Optional[float]
    rate: Optional[float] = None
    rate_type: Optional[RateType] = None
    components: list[RateComponent] = []
    resolution: Resolution
    breakdown: EstimateBreakdown
    alternates: list[EstimateLine] = []
    notes: list[str] = []
    degraded: bool = False


class RefineCandidate(BaseModel):
    code10: str = Field(..., pattern=r"^\d{10}$")
    description: str = Field(..., min_length=1)
    confidence: int = Field(..., ge=0, le=100)


class RateParseRequest(BaseModel):
    text: str
