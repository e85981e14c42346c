from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResolveLibraryInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    library_name: str = Field(
        alias="libraryName",
        description="The name of the library to search for",
    )

    @field_validator("library_name")
    @classmethod
    def validate_library_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("libraryName must not be empty")
        if len(v) > 500:
            raise ValueError("libraryName must not exceed 500 characters")
        return v


class GetLibraryDocsInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    library_id: str = Field(
        alias="context7CompatibleLibraryID",
        description="Exact Context7-compatible library ID (e.g. /mongodb/docs, /vercel/next.js)",
    )
    topic: str | None = Field(
        default=None,
        description='Focus the docs on a specific topic (e.g. "routing", "hooks")',
    )
    tokens: int | None = Field(
        default=None,
        description=(
            "Max number of tokens to return. Values below the configured minimum "
            "are raised to the minimum."
        ),
    )

    @field_validator("library_id")
    @classmethod
    def validate_library_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("context7CompatibleLibraryID must not be empty")
        return v

    @field_validator("topic")
    @classmethod
    def validate_topic(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("tokens")
    @classmethod
    def validate_tokens(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError("tokens must be >= 1")
        return v
