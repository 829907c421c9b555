"""Shared base classes for settings sections.

Sections are plain pydantic models: only the aggregating ``Settings`` reads
the environment, so a section built on its own never picks up stray
variables.
"""

from pydantic import BaseModel, ConfigDict


class IntegrationSettings(BaseModel):
    """Base class for external integration settings."""

    model_config = ConfigDict(extra="ignore")


class FeatureSettings(BaseModel):
    """Base class for feature module settings."""

    model_config = ConfigDict(extra="ignore")


class InfrastructureSettings(BaseModel):
    """Base class for application-level settings (data dir, logging)."""

    model_config = ConfigDict(extra="ignore")
