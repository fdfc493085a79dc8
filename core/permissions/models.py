"""Permission store models."""

import time

from pydantic import BaseModel, Field, StrictBool


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class PermissionEntry(BaseModel):
    """Trust decision for one configuration file."""

    # Only a JSON boolean grants; "yes", 1 and the like mark the store corrupt
    allowed: StrictBool
    timestamp: int = Field(default_factory=now_ms, strict=True, description="Decision time in epoch ms")
