from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

StreakSource = Literal["api", "manual"]


class StreakResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    platform: str
    username: str
    streak: int = Field(ge=0)
    source: StreakSource
    url: str


class CardPlatform(BaseModel):
    # Clients may still send a cached "streak"; it is ignored and refetched.
    model_config = ConfigDict(extra="ignore")

    platform: str = Field(min_length=1, max_length=64)
    username: str = Field(default="user", min_length=1, max_length=100)

    @field_validator("platform")
    @classmethod
    def validate_platform(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("platform is required")
        return normalized

    @field_validator("username", mode="before")
    @classmethod
    def default_blank_username(cls, value: Any) -> Any:
        if value is None:
            return "user"
        if isinstance(value, str):
            return value.strip() or "user"
        return value


class PlatformInfo(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    label: str
    icon: str
    has_api: bool
