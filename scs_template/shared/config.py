"""Generator settings using pydantic-settings."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from scs_template.shared.constants import DEFAULT_BINDER


class GeneratorSettings(BaseSettings):
    """Environment-driven defaults for a generation run."""
    log_level: str = Field(default="info", validation_alias="LOG_LEVEL")
    default_binder: str = Field(
        default=DEFAULT_BINDER, validation_alias="SCS_BINDER"
    )
    default_view: str | None = Field(default=None, validation_alias="SCS_VIEW")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }
