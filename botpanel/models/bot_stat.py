"""Bot statistics singleton model"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

BOT_STAT_ID = 1


class BotStatInput(BaseModel):
    """Complete statistics record; updates replace the stored record wholesale"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    uptime: str = Field(strict=True, description="Human readable uptime, e.g. 0d 4h 12m")
    servers: int = Field(ge=0)
    commands: int = Field(ge=0)
    memory_usage: str = Field(strict=True, description="Process memory, e.g. 84 MB")
    api_latency: int = Field(description="Chat platform latency in ms")
    started_at: datetime
    updated_at: datetime


class BotStat(BotStatInput):
    """The stored statistics singleton"""

    id: int = BOT_STAT_ID
