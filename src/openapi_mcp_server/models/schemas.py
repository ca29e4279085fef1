"""Pydantic models for per-provider settings files."""

from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator


class ProviderConfig(BaseModel):
    """Contents of a provider's optional ``config.json``."""

    headers: Dict[str, str] = Field(
        default_factory=dict,
        description="Static headers sent with every request to this provider",
    )
    base_url: Optional[str] = Field(
        default=None,
        alias="baseUrl",
        description="Overrides the first server URL of the OpenAPI document",
    )

    @field_validator("headers", mode="before")
    @classmethod
    def stringify_header_values(cls, v):
        if isinstance(v, dict):
            return {str(k): str(val) for k, val in v.items()}
        return v

    model_config = {"extra": "ignore", "populate_by_name": True}
