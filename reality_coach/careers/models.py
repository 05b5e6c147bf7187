"""Data models for career facts and alternative careers."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field, field_validator


class CareerFact(BaseModel):
    """Licensing, training and pay facts for a role in one state."""

    state: str = Field(..., min_length=1, description="Two-letter region code")
    role: str = Field(..., min_length=1, description="Role title")
    licensing: str = Field(default="", description="Licensing requirements")
    training: str = Field(default="", description="Training path and duration")
    costs: str = Field(default="", description="Training costs (USD)")
    salary: str = Field(default="", description="Salary ranges (USD)")
    links: list[str] = Field(default_factory=list, description="Reference links")

    @field_validator("state", mode="before")
    @classmethod
    def normalize_state(cls, v: str) -> str:
        return str(v).strip().upper()


class Career(BaseModel):
    """A career that can be suggested as an alternative."""

    title: str = Field(..., min_length=1)
    tags: list[str] = Field(default_factory=list, description="Industry tags")
    personality_tags: list[str] = Field(default_factory=list)
    reality_tags: list[str] = Field(default_factory=list)


@dataclass(frozen=True)
class AltCareer:
    """An alternative career suggestion with its reason."""

    title: str
    reason: str

    def to_dict(self) -> dict:
        return {"title": self.title, "reason": self.reason}

    @classmethod
    def from_dict(cls, data: dict) -> AltCareer:
        return cls(title=data["title"], reason=data["reason"])
