"""Error response models following RFC 7807 Problem Details."""

from typing import Any

from pydantic import BaseModel, Field, model_validator

RFC7231_BASE_URL = "https://datatracker.ietf.org/doc/html/rfc7231#section-"

# HTTP status code to RFC 7231 section (or full URL for other RFCs)
status_to_section: dict[int, str] = {
    400: "6.5.1",
    403: "6.5.3",
    404: "6.5.4",
    405: "6.5.5",
    500: "6.6.1",
    502: "6.6.3",
    503: "6.6.4",
}


def get_rfc_section_url(status: int) -> str:
    """Get the RFC section URL for a given HTTP status code.

    Unknown codes fall back to the 500 section.
    """
    section = status_to_section.get(status, status_to_section[500])
    if section.startswith("https://"):
        return section
    return f"{RFC7231_BASE_URL}{section}"


class ProblemDetail(BaseModel):
    """Problem Detail response as defined in RFC 7807.

    Used for every error that is not a rotation failure (unknown routes,
    disallowed methods, unexpected exceptions).

    Attributes:
        type: URI reference to the problem type (derived from status).
        title: Short, human-readable summary of the problem type.
        status: HTTP status code.
        detail: Human-readable explanation specific to this occurrence.
        instance: Request path of this occurrence.
    """

    type: str | None = Field(
        default=None,
        description="URI reference to the problem type (RFC 7807)",
        json_schema_extra={"example": f"{RFC7231_BASE_URL}6.6.1"},
    )
    title: str = Field(
        ...,
        description="Short, human-readable summary",
        json_schema_extra={"example": "Internal Server Error"},
    )
    status: int = Field(
        ...,
        description="HTTP status code",
        json_schema_extra={"example": 500},
    )
    detail: str | None = Field(
        default=None,
        description="Human-readable explanation",
    )
    instance: str | None = Field(
        default=None,
        description="Request path of this occurrence",
        json_schema_extra={"example": "/device/security-identifier/rotate"},
    )

    @model_validator(mode="before")
    @classmethod
    def set_default_type(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Derive ``type`` from ``status`` when it is not given."""
        if values.get("type") is None:
            values["type"] = get_rfc_section_url(values.get("status", 500))
        return values
