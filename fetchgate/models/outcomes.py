"""Run outcome models — how the executor classified a finished batch."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class RunOutcome(str, Enum):
    """Engine-level result of one run."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ItemClassification(str, Enum):
    """Per-item interpretation of the engine's terminal state."""

    DONE = "done"
    TRANSIENT_NETWORK_FAILURE = "transient_network_failure"
    HARD_FAILURE = "hard_failure"


class ItemOutcome(BaseModel):
    """Classification of a single item after the run."""

    model_config = ConfigDict(frozen=True)

    position: int
    short_desc: str
    uri: str  # credentials already stripped
    classification: ItemClassification
    error_text: str = ""


class RunReport(BaseModel):
    """Aggregate of one executor call.

    ``outcome`` is FAILED only when the engine itself gave up; a
    SUCCEEDED run may still carry hard failures, which the caller
    inspects through ``failed``.
    """

    model_config = ConfigDict(frozen=True)

    outcome: RunOutcome
    items: list[ItemOutcome] = []

    @property
    def ran(self) -> bool:
        return self.outcome == RunOutcome.SUCCEEDED

    @property
    def failed(self) -> bool:
        return any(
            i.classification == ItemClassification.HARD_FAILURE for i in self.items
        )

    @property
    def transient_network_failure(self) -> bool:
        return any(
            i.classification == ItemClassification.TRANSIENT_NETWORK_FAILURE
            for i in self.items
        )

    def by_classification(self, classification: ItemClassification) -> list[ItemOutcome]:
        return [i for i in self.items if i.classification == classification]
