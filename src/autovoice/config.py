from typing import Any

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings

_PROMOTE_AFTER_HELP = "Missing configuration for auto-promotion (eg --promote-after-minutes 5)"


class Settings(BaseSettings):
    model_config = {
        "env_prefix": "AUTOVOICE_",
        "env_file": ".env",
        "extra": "ignore",
        "populate_by_name": True,
    }

    # IRC
    server: str
    port: int = 6697
    use_tls: bool = True
    nickname: str
    # Reads AUTOVOICE_PASSWORD or IRC_USER_PASSWORD
    password: str | None = Field(
        default=None,
        validation_alias=AliasChoices("AUTOVOICE_PASSWORD", "IRC_USER_PASSWORD"),
    )
    channel: str

    # Promotion (exactly one of these)
    promote_after_seconds: int | None = Field(default=None, ge=0)
    promote_after_minutes: int | None = Field(default=None, ge=0)
    promote_after_hours: int | None = Field(default=None, ge=0)

    # Scheduling
    check_interval: float = Field(default=60.0, gt=0)
    jitter_min_ms: int = Field(default=100, ge=0)
    jitter_max_ms: int = Field(default=250, ge=0)

    @model_validator(mode="after")
    def _check_promote_after(self) -> "Settings":
        given = [
            v
            for v in (self.promote_after_seconds, self.promote_after_minutes, self.promote_after_hours)
            if v is not None
        ]
        if not given:
            raise ValueError(_PROMOTE_AFTER_HELP)
        if len(given) > 1:
            raise ValueError("Only one of promote_after_seconds/minutes/hours may be set")
        if self.jitter_min_ms > self.jitter_max_ms:
            raise ValueError("jitter_min_ms must not be greater than jitter_max_ms")
        return self

    @property
    def cooldown(self) -> float:
        """Promotion cooldown in seconds."""
        if self.promote_after_seconds is not None:
            return float(self.promote_after_seconds)
        if self.promote_after_minutes is not None:
            return float(self.promote_after_minutes * 60)
        return float(self.promote_after_hours * 3600)

    @property
    def jitter(self) -> tuple[float, float]:
        return self.jitter_min_ms / 1000, self.jitter_max_ms / 1000


_PROMOTE_AFTER_FIELDS = ("promote_after_seconds", "promote_after_minutes", "promote_after_hours")


def load_settings(**overrides: Any) -> Settings:
    """Build Settings from env/.env, with non-None ``overrides`` (CLI flags) on top.

    A cooldown given as an override replaces any cooldown from the
    environment, whatever its unit.
    """
    kwargs = {k: v for k, v in overrides.items() if v is not None}
    if any(field in kwargs for field in _PROMOTE_AFTER_FIELDS):
        for field in _PROMOTE_AFTER_FIELDS:
            kwargs.setdefault(field, None)
    return Settings(**kwargs)
