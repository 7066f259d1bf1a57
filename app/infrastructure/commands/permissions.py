"""Permission checks run before a command executes."""

import inspect
from typing import Awaitable, Callable, Dict, Iterable, Optional, Union

from core.logging import get_module_logger
from infrastructure.commands.context import CommandContext
from infrastructure.commands.models import DefaultCommandPermission
from infrastructure.commands.tree import CommandNode

logger = get_module_logger()

PermissionCheck = Callable[[CommandContext], Union[bool, Awaitable[bool]]]


class PermissionValidator:
    """Maps permission names to checks.

    EVERYONE always passes and OWNER passes for the configured owner ids.
    Other permissions need a registered check; unknown ones are denied.

    Example:
        validator = PermissionValidator(owner_ids=["42"])
        validator.register("Moderator", lambda ctx: "mod" in ctx.metadata.get("roles", []))
    """

    def __init__(
        self,
        owner_ids: Iterable[str] = (),
        checks: Optional[Dict[str, PermissionCheck]] = None,
    ):
        self.owner_ids = frozenset(owner_ids)
        self._checks: Dict[str, PermissionCheck] = {
            DefaultCommandPermission.EVERYONE.value: lambda ctx: True,
            DefaultCommandPermission.OWNER.value: lambda ctx: ctx.user_id in self.owner_ids,
        }
        self._checks.update(checks or {})

    def register(self, permission: str, check: PermissionCheck) -> None:
        self._checks[permission] = check

    async def __call__(self, ctx: CommandContext, node: CommandNode) -> bool:
        check = self._checks.get(node.permission)
        if check is None:
            logger.warning(
                "unknown_permission", permission=node.permission, command=node.full_name
            )
            return False
        allowed = check(ctx)
        if inspect.isawaitable(allowed):
            allowed = await allowed
        return bool(allowed)
