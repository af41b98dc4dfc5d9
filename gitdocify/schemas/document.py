"""Document generation schemas.

Request and response bodies use camelCase on the wire; Python code uses the
snake_case attribute names.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerationOptions(CamelModel):
    """User-selected documentation options.

    Section flags default to included, except contributing guidelines.
    ``format`` is advisory and does not change the prompt.
    """
    include_readme: bool = True
    include_installation: bool = True
    include_api: bool = True
    include_examples: bool = True
    include_contributing: bool = False
    depth: Optional[str] = "detailed"
    format: Optional[Literal["markdown", "html", "pdf"]] = "markdown"
    temperature: Optional[float] = None
    max_output_tokens: Optional[int] = None

    @field_validator(
        "include_readme", "include_installation", "include_api",
        "include_examples", "include_contributing", mode="before",
    )
    @classmethod
    def null_flag_uses_default(cls, v, info: ValidationInfo):
        if v is None:
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("depth", mode="before")
    @classmethod
    def unknown_depth_reads_as_detailed(cls, v):
        # Anything that is not a string falls back to the detailed wording
        return v if isinstance(v, str) else None


class GenerateRequest(CamelModel):
    """One of three request shapes: repository, free-form prompt, or a code file."""
    repository: Optional[str] = None
    branch: Optional[str] = None
    prompt: Optional[str] = None
    code: Optional[str] = None
    file_type: Optional[str] = None
    file_name: Optional[str] = None
    options: GenerationOptions = Field(default_factory=GenerationOptions)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"repository": "octocat/Hello-World", "options": {"depth": "basic"}},
                {"prompt": "Write an onboarding guide for new backend engineers"},
                {"code": "def add(a, b):\n    return a + b", "fileType": "python", "fileName": "math.py"},
            ]
        },
    )


class DocumentResponse(CamelModel):
    """Stored document as returned to its owner."""
    id: str
    title: str
    content: str
    repository: Optional[str] = None
    user_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class DocumentListItem(CamelModel):
    """Document listing entry, without content."""
    id: str
    title: str
    repository: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class DocumentListResponse(BaseModel):
    documents: List[DocumentListItem]


class GenerateResponse(CamelModel):
    document: DocumentResponse
    content: str
    repository: Optional[str] = None
    generated_at: datetime
    fallback: bool = False
    notice: Optional[str] = None
