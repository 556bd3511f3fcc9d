"""Model registry entities."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RegistryTag(BaseModel):
    key: str
    value: str


class ModelVersion(BaseModel):
    """One version of a registered model.

    Identified by ``(name, version)``; ``version`` is a string on the wire.
    """

    name: str
    version: str
    creation_timestamp: int | None = None
    last_updated_timestamp: int | None = None
    user_id: str | None = None
    current_stage: str | None = None
    description: str | None = None
    source: str | None = None
    run_id: str | None = None
    status: str | None = None
    status_message: str | None = None
    run_link: str | None = None
    tags: list[RegistryTag] = Field(default_factory=list)
    aliases: list[str] = Field(default_factory=list)

    def reference(self) -> dict[str, str | None]:
        """Snapshot used to reference this version from another run."""
        return {
            "name": self.name,
            "version": self.version,
            "current_stage": self.current_stage,
            "source": self.source,
        }


class RegisteredModelAlias(BaseModel):
    alias: str
    version: str


class RegisteredModel(BaseModel):
    """A named model in the registry."""

    name: str
    creation_timestamp: int | None = None
    last_updated_timestamp: int | None = None
    user_id: str | None = None
    description: str | None = None
    latest_versions: list[ModelVersion] = Field(default_factory=list)
    tags: list[RegistryTag] = Field(default_factory=list)
    aliases: list[RegisteredModelAlias] = Field(default_factory=list)


class SearchRegisteredModelsPage(BaseModel):
    registered_models: list[RegisteredModel] = Field(default_factory=list)
    next_page_token: str | None = None
