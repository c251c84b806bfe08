from pydantic import BaseModel, ConfigDict, Field


class Declaration(BaseModel):
    model_config = ConfigDict(frozen=True)

    receiver: str = ""
    purchased: bool = False


class SubmissionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    giver: str
    contact: str = ""
    declarations: tuple[Declaration, ...] = ()


class Assignment(BaseModel):
    model_config = ConfigDict(frozen=True)

    giver: str
    receiver: str


class SkippedDeclaration(BaseModel):
    model_config = ConfigDict(frozen=True)

    giver: str
    receiver: str
    reason: str


class LockResult(BaseModel):
    locked_pairs: list[Assignment] = Field(default_factory=list)
    free_givers: set[str] = Field(default_factory=set)
    free_receivers: set[str] = Field(default_factory=set)
    skipped: list[SkippedDeclaration] = Field(default_factory=list)


class DrawOutcome(BaseModel):
    assignments: list[Assignment] = Field(default_factory=list)
    count: int = 0
    success: bool = False


class DeliveryReport(BaseModel):
    attempted: int = 0
    failed: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)


class AssignmentsPayload(BaseModel):
    assignments: list[Assignment]


class DrawResponse(BaseModel):
    success: bool
    message: str
    assignments: list[Assignment] | None = None
