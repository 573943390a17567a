"""Run configuration consumed by the orchestrator."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator

ENV_PREFIX = "LAAKHAY_PRUNE_"


class PruneConfig(BaseModel):
    """Tuning knobs for a prune run.

    All values must be strictly positive; the model is frozen so a single
    instance can be shared between runs and test fixtures.

    Attributes:
        max_concurrency: Maximum number of listing/delete calls in flight (K)
        page_size: Number of child keys requested per listing page
        call_timeout: Per-call deadline in seconds
        max_attempts: Attempts per operation before it is declared failed
        backoff_base: Delay in seconds before the first retry
        backoff_max: Upper bound on any single backoff delay
        backoff_jitter: +/- fraction applied to each delay to avoid thundering herds
    """

    max_concurrency: int = Field(default=100, gt=0)
    page_size: int = Field(default=500, gt=0)
    call_timeout: float = Field(default=30.0, gt=0)
    max_attempts: int = Field(default=3, gt=0)
    backoff_base: float = Field(default=0.5, gt=0)
    backoff_max: float = Field(default=30.0, gt=0)
    backoff_jitter: float = Field(default=0.2, gt=0, le=1)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def validate_backoff_bounds(self) -> PruneConfig:
        """Validate backoff_max >= backoff_base."""
        if self.backoff_max < self.backoff_base:
            raise ValueError("backoff_max must be >= backoff_base")
        return self

    @classmethod
    def from_env(
        cls,
        prefix: str = ENV_PREFIX,
        environ: Mapping[str, str] | None = None,
        **overrides: object,
    ) -> PruneConfig:
        """Build a config from ``<prefix><FIELD>`` environment variables.

        Explicit keyword overrides win over the environment. Values are
        coerced and validated by pydantic.

        Examples:
            LAAKHAY_PRUNE_MAX_CONCURRENCY=20 LAAKHAY_PRUNE_PAGE_SIZE=1000
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for name in cls.model_fields:
            raw = env.get(f"{prefix}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw
        values.update(overrides)
        return cls.model_validate(values)
