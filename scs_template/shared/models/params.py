"""Generation parameters (template options) as a Pydantic v2 model."""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from scs_template.shared.constants import (
    DEFAULT_BINDER,
    DEFAULT_DYNAMIC_TYPE,
    SOLACE_DEFAULT,
    SOLACE_HOST,
    SUPPORTED_BINDERS,
)
from scs_template.shared.errors import UnsupportedBinderError


class GenerationParams(BaseModel):
    """Options recognised by the generator.

    Field aliases are the camelCase parameter names used on the command
    line of the template; snake_case names are accepted too.
    ``dynamic_type`` is not used by the binding engine; the rendering stage
    reads it to choose StreamBridge or header-based dynamic topics.
    """
    binder: str = DEFAULT_BINDER
    reactive: bool = False
    view: Literal["client", "provider"] | None = None
    dynamic_type: Literal["streamBridge", "header"] = Field(
        default=DEFAULT_DYNAMIC_TYPE, alias="dynamicType"
    )
    parameters_to_headers: bool = Field(default=False, alias="parametersToHeaders")
    artifact_type: Literal["application", "library"] = Field(
        default="application", alias="artifactType"
    )
    actuator: bool = False
    host: str = SOLACE_HOST
    msg_vpn: str = Field(default=SOLACE_DEFAULT, alias="msgVpn")
    username: str = SOLACE_DEFAULT
    password: str = SOLACE_DEFAULT

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
        "frozen": True,
    }

    @field_validator("binder", mode="before")
    @classmethod
    def check_binder(cls, value: Any) -> Any:
        if value is None or value == "":
            return DEFAULT_BINDER
        if value not in SUPPORTED_BINDERS:
            raise UnsupportedBinderError(value)
        return value

    @property
    def is_application(self) -> bool:
        return self.artifact_type == "application"
