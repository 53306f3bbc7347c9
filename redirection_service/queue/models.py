"""
Data models for visit events sent to the dispatch transport.
"""

import time

from pydantic import BaseModel, Field

NANOS_PER_SECOND = 1_000_000_000


class Timestamp(BaseModel):
    """Point in time as seconds plus sub-second nanoseconds since the epoch."""

    seconds: int = Field(..., description="Whole seconds since the Unix epoch")
    nanos: int = Field(0, ge=0, lt=NANOS_PER_SECOND, description="Sub-second nanoseconds")

    @classmethod
    def now(cls) -> "Timestamp":
        seconds, nanos = divmod(time.time_ns(), NANOS_PER_SECOND)
        return cls(seconds=seconds, nanos=nanos)


class VisitEvent(BaseModel):
    """
    Record of one successful redirect.

    Built when the mapping lookup succeeds and handed to the dispatcher;
    downstream analytics consume it from the transport.
    """

    tag: str = Field(..., min_length=1, description="The key that was visited")
    time: Timestamp = Field(default_factory=Timestamp.now, description="When the redirect happened")

    model_config = {
        "json_schema_extra": {
            "example": {
                "tag": "12345678",
                "time": {"seconds": 1767225600, "nanos": 125000000},
            }
        }
    }


class VisitTask(BaseModel):
    """Task envelope understood by the downstream consumer."""

    insert_record: VisitEvent

    def encode(self) -> bytes:
        return self.model_dump_json().encode("utf-8")

    @classmethod
    def decode(cls, payload: bytes) -> "VisitTask":
        return cls.model_validate_json(payload)
