from pydantic import BaseModel, Field, model_validator
from uuid import UUID
from datetime import datetime
from typing import List, Optional

from thesis_app.models.common import Envelope, ListEnvelope


class RubricTemplateBase(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    version: Optional[int] = Field(None, ge=1)
    active: Optional[bool] = None
    description: Optional[str] = Field(None, max_length=2000)


class RubricTemplateCreate(RubricTemplateBase):
    name: str = Field(..., min_length=1, max_length=255)
    version: int = Field(default=1, ge=1)
    active: bool = True


class RubricTemplateUpdate(RubricTemplateBase):
    pass


class RubricCriterionBase(BaseModel):
    criterion: Optional[str] = Field(None, min_length=1, max_length=500, description="Rubric dimension being scored")
    description: Optional[str] = Field(None, max_length=2000)
    weight: Optional[float] = Field(None, ge=0, description="Relative importance in the weighted average")
    min_score: Optional[int] = Field(None, description="Lowest selectable score")
    max_score: Optional[int] = Field(None, description="Highest selectable score")

    @model_validator(mode="after")
    def validate_score_range(self):
        """min_score must not exceed max_score when both are given."""
        if self.min_score is not None and self.max_score is not None and self.min_score > self.max_score:
            raise ValueError("min_score must be less than or equal to max_score")
        return self


class RubricCriterionCreate(RubricCriterionBase):
    criterion: str = Field(..., min_length=1, max_length=500)
    weight: float = Field(default=1.0, ge=0)
    min_score: int = 1
    max_score: int = 5


class RubricCriterionUpdate(RubricCriterionBase):
    pass


class RubricCriterionResponse(BaseModel):
    id: UUID
    template_id: UUID
    criterion: str
    description: Optional[str] = None
    weight: float = 1.0
    min_score: int = 1
    max_score: int = 5
    created_at: Optional[datetime] = None


class RubricScaleLevel(BaseModel):
    score: int = Field(..., ge=1, le=5)
    adjectival: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)


class RubricScaleLevelsUpdate(BaseModel):
    """Replaces the whole label set; an empty list clears it."""
    levels: List[RubricScaleLevel] = Field(default_factory=list)

    @model_validator(mode="after")
    def unique_scores(self):
        scores = [level.score for level in self.levels]
        if len(scores) != len(set(scores)):
            raise ValueError("Each score can have only one scale level")
        return self


class RubricScaleLevelsEnvelope(Envelope):
    template_id: UUID
    levels: List[RubricScaleLevel]


class RubricTotals(BaseModel):
    criteria_count: int = 0
    total_weight: float = 0.0
    total_min: float = 0.0
    total_max: float = 0.0


class RubricTemplateResponse(BaseModel):
    id: UUID
    name: str
    version: int = 1
    active: bool = True
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RubricTemplateDetail(RubricTemplateResponse):
    criteria: List[RubricCriterionResponse] = Field(default_factory=list)
    totals: RubricTotals = Field(default_factory=RubricTotals)
    scale_levels: List[RubricScaleLevel] = Field(default_factory=list)


class RubricTemplateEnvelope(Envelope):
    template: RubricTemplateDetail


class RubricTemplateListResponse(ListEnvelope):
    items: List[RubricTemplateResponse]


class RubricCriterionEnvelope(Envelope):
    criterion: RubricCriterionResponse
