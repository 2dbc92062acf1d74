"""Command models for the slash command registry"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CommandCreate(BaseModel):
    """Payload accepted when registering a new command"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1, strict=True, description="Command name, matched exactly (without the slash)")
    description: str = Field(min_length=1, strict=True)
    usage: str = Field(min_length=1, strict=True, description="Usage hint, e.g. /help [command]")
    active: bool = Field(default=True, strict=True, description="Whether the command answers")


class CommandUpdate(BaseModel):
    """Partial update payload; omitted fields keep their value, explicit null is rejected"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: str = Field(default=None, min_length=1, strict=True)
    description: str = Field(default=None, min_length=1, strict=True)
    usage: str = Field(default=None, min_length=1, strict=True)
    active: bool = Field(default=None, strict=True)

    def changes(self) -> dict:
        """Return only the fields the caller actually supplied"""
        return self.model_dump(exclude_unset=True)


class Command(BaseModel):
    """A registered slash command"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    description: str
    usage: str
    active: bool = True
    created_at: datetime
