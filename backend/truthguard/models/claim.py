from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime, timezone
from enum import Enum


class Scope(str, Enum):
    """Partition deciding which endpoint surfaces a record."""
    LOCAL = "Local"
    GLOBAL = "Global"


class VerdictLabel(str, Enum):
    REAL = "Real"
    FAKE = "Fake"
    MISLEADING = "Misleading"
    UNVERIFIED = "Unverified"
    SATIRE = "Satire"


class Claim(BaseModel):
    """A candidate statement pulled from an untrusted feed"""
    model_config = ConfigDict(frozen=True)

    title: str
    url: str = ""
    source_label: str = ""


class Verdict(BaseModel):
    """
    Structured model judgment on a claim.

    The model is asked to emit the label under "verdict"; "label" is accepted
    too. Anything missing, unknown or out of range fails validation so the
    caller can treat the whole verdict as absent.
    """
    model_config = ConfigDict(populate_by_name=True)

    label: VerdictLabel = Field(validation_alias=AliasChoices("verdict", "label"))
    truth_score: int = Field(..., ge=0, le=100)
    propaganda_score: int = Field(..., ge=0, le=100)
    category: str = Field(..., min_length=1, max_length=60)
    explanation: str = Field(..., min_length=1)
    image_keywords: Optional[str] = None

    @field_validator("label", mode="before")
    @classmethod
    def normalize_label(cls, v):
        if isinstance(v, str):
            for label in VerdictLabel:
                if label.value.lower() == v.strip().lower():
                    return label
        return v

    @field_validator("category")
    @classmethod
    def category_is_topic(cls, v: str) -> str:
        """Scope values belong in VerifiedRecord.scope, not the topic tag"""
        if v.strip().lower() in {scope.value.lower() for scope in Scope}:
            return "General"
        return v.strip()


class VerifiedRecord(BaseModel):
    """Persisted union of Claim + Verdict + bookkeeping (matches MongoDB document)"""
    title: str
    url: str = ""
    source_label: str = ""
    label: VerdictLabel
    truth_score: int = Field(..., ge=0, le=100)
    propaganda_score: int = Field(..., ge=0, le=100)
    category: str
    explanation: str
    image_keywords: Optional[str] = None
    evidence: str = ""
    scope: Scope
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_verdict(cls, claim: Claim, verdict: Verdict, evidence: str, scope: Scope) -> "VerifiedRecord":
        return cls(
            title=claim.title,
            url=claim.url,
            source_label=claim.source_label,
            evidence=evidence,
            scope=scope,
            **verdict.model_dump(),
        )

    def to_document(self) -> dict:
        """Mongo document form: enums stored as plain strings."""
        return self.model_dump(mode="python") | {
            "label": self.label.value,
            "scope": self.scope.value,
        }


class ChatRequest(BaseModel):
    message: str


class ChatReply(BaseModel):
    reply: str
