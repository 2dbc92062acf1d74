"""
Command Registry API Router

CRUD over the slash commands. Changes are mirrored to the chat client's
command menu in the background.
"""

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response

from botpanel.api.dependencies import get_chat_client, get_storage
from botpanel.api.errors import internal_errors, parse_id, read_json_body, validate_payload
from botpanel.exceptions import NotFoundError, ValidationError
from botpanel.models import Command, CommandCreate, CommandUpdate
from botpanel.services.chat_client import ChatClient
from botpanel.storage import MemStorage
from botpanel.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/commands", tags=["commands"])

INVALID_ID = "Invalid command ID"
INVALID_DATA = "Invalid command data"
NOT_FOUND = "Command not found"


def _ensure_unique_name(storage: MemStorage, name: str, command_id: Optional[int] = None):
    existing = storage.get_command_by_name(name)
    if existing is not None and existing.id != command_id:
        raise ValidationError(
            INVALID_DATA,
            errors=[{"type": "duplicate", "loc": ["name"], "msg": f"Command '{name}' already exists"}],
        )


def _mirror_commands(background_tasks: BackgroundTasks, chat_client: Optional[ChatClient]):
    sync = getattr(chat_client, "sync_commands", None)
    if sync is not None:
        background_tasks.add_task(sync)


@router.get("", response_model=List[Command])
async def list_commands(storage: MemStorage = Depends(get_storage)):
    with internal_errors("Failed to get commands"):
        return storage.list_commands()


@router.get("/{command_id}", response_model=Command)
async def get_command(command_id: str, storage: MemStorage = Depends(get_storage)):
    with internal_errors("Failed to get command"):
        command = storage.get_command(parse_id(command_id, INVALID_ID))
        if command is None:
            raise NotFoundError(NOT_FOUND)
        return command


@router.post("", response_model=Command, status_code=201)
async def create_command(
    request: Request,
    background_tasks: BackgroundTasks,
    storage: MemStorage = Depends(get_storage),
    chat_client: Optional[ChatClient] = Depends(get_chat_client),
):
    with internal_errors("Failed to create command"):
        payload = await read_json_body(request, INVALID_DATA)
        data = validate_payload(CommandCreate, payload, INVALID_DATA)
        _ensure_unique_name(storage, data.name)

        command = storage.create_command(data)
        logger.info(f"Command created: /{command.name} (id {command.id})")
        _mirror_commands(background_tasks, chat_client)
        return command


@router.patch("/{command_id}", response_model=Command)
async def update_command(
    command_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    storage: MemStorage = Depends(get_storage),
    chat_client: Optional[ChatClient] = Depends(get_chat_client),
):
    with internal_errors("Failed to update command"):
        parsed_id = parse_id(command_id, INVALID_ID)
        payload = await read_json_body(request, INVALID_DATA)
        changes = validate_payload(CommandUpdate, payload, INVALID_DATA).changes()
        if "name" in changes:
            _ensure_unique_name(storage, changes["name"], parsed_id)

        command = storage.update_command(parsed_id, changes)
        if command is None:
            raise NotFoundError(NOT_FOUND)

        logger.info(f"Command updated: /{command.name} (id {command.id}) fields={sorted(changes)}")
        _mirror_commands(background_tasks, chat_client)
        return command


@router.delete("/{command_id}", status_code=204)
async def delete_command(
    command_id: str,
    background_tasks: BackgroundTasks,
    storage: MemStorage = Depends(get_storage),
    chat_client: Optional[ChatClient] = Depends(get_chat_client),
):
    with internal_errors("Failed to delete command"):
        parsed_id = parse_id(command_id, INVALID_ID)
        if not storage.delete_command(parsed_id):
            raise NotFoundError(NOT_FOUND)

        logger.info(f"Command deleted: id {parsed_id}")
        _mirror_commands(background_tasks, chat_client)
        return Response(status_code=204)
