"""Models for broadcast cycle outcomes (never persisted)."""

from pydantic import BaseModel, ConfigDict, Field

from models.types import EmailAddress


class DispatchResult(BaseModel):
    """Outcome of sending the digest to one recipient."""

    model_config = ConfigDict(frozen=True)

    recipient: EmailAddress
    success: bool
    email_id: str | None = None
    error: str | None = None


class BroadcastSummary(BaseModel):
    """Aggregated counts for one broadcast cycle."""

    sent: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)
    total: int = Field(0, ge=0)

    @classmethod
    def from_results(cls, results: list[DispatchResult]) -> "BroadcastSummary":
        sent = sum(1 for r in results if r.success)
        return cls(sent=sent, failed=len(results) - sent, total=len(results))
