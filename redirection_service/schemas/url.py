from pydantic import BaseModel, ConfigDict, Field, field_validator


def is_header_safe(value: str) -> bool:
    """
    True when ``value`` can be sent verbatim as an HTTP header value:
    latin-1 encodable and free of control characters.
    """
    try:
        value.encode("latin-1")
    except UnicodeEncodeError:
        return False
    return not any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in value)


class CreateURLRequest(BaseModel):
    """Body of ``POST /api/v1/create``. Unknown fields are ignored."""

    url: str = Field(..., description="The URL to redirect to")

    model_config = ConfigDict(extra="ignore")

    @field_validator("url")
    @classmethod
    def validate_location(cls, v: str) -> str:
        """The URL is returned unchanged as the redirect Location header"""
        if not is_header_safe(v):
            raise ValueError("URL must be latin-1 text without control characters")
        return v
