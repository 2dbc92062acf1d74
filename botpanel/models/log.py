"""Event log models"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Event types written by the application itself
EVENT_TEST = "Test"
EVENT_SYSTEM = "System"
EVENT_ERROR = "Error"
EVENT_COMMAND = "Command"


class LogCreate(BaseModel):
    """Payload accepted when appending a log entry"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    event_type: str = Field(strict=True, description="Test, System, Error, Command, ...")
    server: str = Field(strict=True)
    user: str = Field(strict=True)
    details: str = Field(strict=True)


class Log(BaseModel):
    """An immutable, timestamped event log entry"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: int
    event_type: str
    server: str
    user: str
    details: str
    timestamp: datetime
