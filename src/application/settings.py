"""Runtime configuration for the planner and its external collaborators.

Defaults work out of the box against the public Nominatim and
Open-Elevation services; every field can be overridden from the
environment with an RF_PLANNER_ prefix (e.g. RF_PLANNER_HTTP_TIMEOUT_S=5).
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "RF_PLANNER_"


class PlannerSettings(BaseModel):
    """Immutable settings object passed to adapters and services."""

    nominatim_url: str = "https://nominatim.openstreetmap.org"
    open_elevation_url: str = "https://api.open-elevation.com"
    user_agent: str = "rf-link-planner/0.1"
    accept_language: str = "en"

    http_timeout_s: float = Field(default=10.0, gt=0)
    placement_timeout_s: float = Field(default=8.0, gt=0)

    elevation_segments: int = Field(default=20, ge=1)  # 21 points per profile
    default_frequency_ghz: float = Field(default=5.0, gt=0)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "PlannerSettings":
        """Build settings from RF_PLANNER_* variables over the defaults.

        Raises:
            pydantic.ValidationError: a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        overrides = {}
        for name in cls.model_fields:
            value = env.get(ENV_PREFIX + name.upper())
            if value is not None and value != "":
                overrides[name] = value
        return cls(**overrides)
