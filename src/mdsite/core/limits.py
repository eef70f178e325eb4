"""Size and depth ceilings shared by every ingestion component"""

from pydantic import BaseModel, ConfigDict, Field


class Limits(BaseModel):
    """Immutable resource limits; every field must be positive."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    max_markdown_file_size:         int = Field(default=10_485_760, gt=0, description="Max markdown body size in bytes")
    max_front_matter_size:          int = Field(default=100_000,    gt=0, description="Max YAML front matter size in bytes")
    max_front_matter_depth:         int = Field(default=10,         gt=0, description="Max nesting depth of front matter values")
    max_front_matter_array_length:  int = Field(default=1000,       gt=0, description="Max items in a front matter sequence")
    max_front_matter_object_keys:   int = Field(default=100,        gt=0, description="Max keys in a nested front matter mapping")
    max_front_matter_string_length: int = Field(default=10_000,     gt=0, description="Max characters in a front matter string")
    max_front_matter_key_length:    int = Field(default=100,        gt=0, description="Max characters in a front matter key")
    max_markdown_nesting:           int = Field(default=20,         gt=0, description="Max heading/blockquote/indent nesting")
    max_repeated_chars:             int = Field(default=1000,       gt=0, description="Max run of a structural character")


DEFAULT_LIMITS = Limits()
