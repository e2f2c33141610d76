"""Data models for git progress events."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class ProgressStep(BaseModel):
    """One named stretch of a git operation and its relative weight.

    The title is everything up to (but not including) the last ``": "`` in a
    progress line, so ``remote: Compressing objects:  14% (159/1133)`` has the
    title ``remote: Compressing objects``.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    weight: float


class GitProgressInfo(BaseModel):
    """Structured form of a single git progress line."""

    model_config = ConfigDict(frozen=True)

    title: str
    value: int
    total: int | None = None
    percent: int | None = None
    done: bool = False
    text: str


class GitProgress(BaseModel):
    """A line that matched a known step."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["progress"] = "progress"
    percent: float
    details: GitProgressInfo


class GitOutput(BaseModel):
    """A line that did not move progress; carries the last known percent."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["context"] = "context"
    percent: float
    text: str


ProgressEvent = Annotated[GitProgress | GitOutput, Field(discriminator="kind")]
