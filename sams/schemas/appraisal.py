from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Any, Dict, List, Optional, Union


class DocumentModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Target(DocumentModel):
    id: int = 1
    area: str = ""
    description: str = ""
    target: Union[str, float, None] = ""
    actual: Union[str, float, None] = ""
    actual_description: str = ""

    @property
    def has_actual(self) -> bool:
        return self.actual is not None and str(self.actual).strip() != ""


class Observation(DocumentModel):
    # Extra keys (class, learners present, ...) are kept as-is.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    ratings: Dict[int, Any] = Field(default_factory=dict)
    documents: Dict[int, str] = Field(default_factory=dict)
    comments: str = ""
    date: str = ""
    time: str = ""
    subject: str = ""
    topic: str = ""
    work_appraised: str = ""
    status: str = "PENDING"

    @property
    def is_started(self) -> bool:
        return bool(self.ratings) or bool(self.date.strip())


class Evaluation(DocumentModel):
    ratings: Dict[int, Any] = Field(default_factory=dict)
    progress_comments: List[str] = Field(default_factory=lambda: ["", ""])
    improvement_comments: List[str] = Field(default_factory=lambda: ["", ""])


class SignatureBlock(DocumentModel):
    appraisee_signature: str = ""
    appraisee_date: str = ""
    appraiser_signature: str = ""
    appraiser_date: str = ""

    @property
    def is_signed(self) -> bool:
        return bool(self.appraisee_signature) and bool(self.appraiser_signature)


class AppraisalData(DocumentModel):
    term: str = ""
    year: str = ""
    targets: List[Target] = Field(default_factory=lambda: [Target()])
    observation1: Observation = Field(default_factory=Observation)
    observation2: Observation = Field(default_factory=Observation)
    evaluation: Evaluation = Field(default_factory=Evaluation)
    target_signatures: SignatureBlock = Field(default_factory=SignatureBlock)
    target_review_signatures: SignatureBlock = Field(default_factory=SignatureBlock)
    completion_signatures: SignatureBlock = Field(default_factory=SignatureBlock)

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class AppraisalSave(BaseModel):
    appraisal_id: Optional[str] = None
    appraiser_id: str
    appraisee_id: str
    role: Optional[str] = None
    status: str = "DRAFT"
    appraisal_data: AppraisalData


class StatusReset(BaseModel):
    status: str


class DeletionRequest(BaseModel):
    reason: str = Field(..., min_length=1)


class ScoreBreakdown(BaseModel):
    target_average: float
    target_rating: str
    target_marks: int
    observation1_score: float
    observation2_score: float
    observation_score: float
    evaluation_score: float
    total: float
    max_targets: int
    max_observation: int
    max_evaluation: int
    max_total: int
    percentage: float
    rating: str


class AppraisalResponse(BaseModel):
    id: str
    appraiser_id: str
    appraisee_id: str
    role: Optional[str]
    status: str
    appraisal_data: Dict[str, Any]
    overall_score: float
    deletion_requested: bool
    deletion_reason: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class AppraisalDetailResponse(AppraisalResponse):
    score: ScoreBreakdown


class ActionResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    appraisal: Optional[AppraisalResponse] = None
