"""Channel credential entity."""

from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from src.core.clock import utc_now


class Credential(BaseModel):
    """OAuth token pair for one integration identity."""

    identity: str = "default"
    access_token: str
    refresh_token: str
    expires_at: datetime
    user_id: str | None = None
    updated_at: datetime = Field(default_factory=utc_now)

    def is_expired(self, now: datetime | None = None, margin_seconds: int = 0) -> bool:
        now = now or utc_now()
        return self.expires_at <= now + timedelta(seconds=margin_seconds)

    def hours_until_expiry(self, now: datetime | None = None) -> float:
        now = now or utc_now()
        return max(0.0, (self.expires_at - now).total_seconds() / 3600)
