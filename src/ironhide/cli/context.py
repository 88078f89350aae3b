"""Per-invocation wiring of services around a loaded backend."""

from __future__ import annotations

from dataclasses import dataclass

from ironhide.cli import group_prompt
from ironhide.cli.group_prompt import GroupChoicePrompter, PromptLine
from ironhide.config import Settings
from ironhide.core.device_service import DeviceService
from ironhide.core.file_service import FileService
from ironhide.core.group_cache import GroupCache
from ironhide.core.group_service import GroupService
from ironhide.core.membership_service import MembershipService
from ironhide.core.protocols import Backend, ChoicePrompter, FileStore
from ironhide.core.resolver import ReferenceResolver
from ironhide.infra.local_files import LocalFileStore


@dataclass(frozen=True)
class CommandContext:
    """Everything a command handler needs."""

    settings: Settings
    resolver: ReferenceResolver
    files: FileService
    devices: DeviceService
    membership: MembershipService
    groups: GroupService
    prompt_line: PromptLine
    """Reads one line of user input, e.g. a confirmation."""


def build_context(
    settings: Settings,
    backend: Backend,
    *,
    prompter: ChoicePrompter | None = None,
    file_store: FileStore | None = None,
    prompt_line: PromptLine | None = None,
) -> CommandContext:
    """Instantiate the services for one CLI run.

    The group cache created here lives for the whole process and is
    shared by the resolver and the group service.
    """
    line_reader = prompt_line or group_prompt.questionary_prompt_line
    cache = GroupCache(backend.directory)
    return CommandContext(
        settings=settings,
        resolver=ReferenceResolver(cache, prompter or GroupChoicePrompter(line_reader)),
        files=FileService(
            backend.documents,
            file_store or LocalFileStore(),
            encrypted_extension=settings.encrypted_extension,
        ),
        devices=DeviceService(backend.devices),
        membership=MembershipService(backend.membership),
        groups=GroupService(backend.directory, cache),
        prompt_line=line_reader,
    )
