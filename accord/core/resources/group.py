"""Group resource — local groups."""

from __future__ import annotations

from typing import ClassVar, Literal

from accord.core.models.resource import Change, ResourceKind
from accord.core.resources.base import ExecutionContext, Resource, unknown_change


class Group(Resource):
    kind: ClassVar[ResourceKind] = ResourceKind.GROUP

    name: str
    gid: int | None = None
    state: Literal["present", "absent"] = "present"

    @property
    def key(self) -> str:
        return self.name

    def plan(self, ctx: ExecutionContext) -> list[Change]:
        current = ctx.backends.accounts(ctx.capabilities).get_group(self.name)

        if self.state == "absent":
            return [Change("remove")] if current is not None else []
        if current is None:
            return [Change("create")]
        if self.gid is not None and current.gid != self.gid:
            return [Change("set gid", str(self.gid))]
        return []

    def converge(self, ctx: ExecutionContext, changes: list[Change]) -> None:
        backend = ctx.backends.accounts(ctx.capabilities)
        for change in changes:
            if change.action == "create":
                backend.create_group(self.name, gid=self.gid)
            elif change.action == "set gid" and self.gid is not None:
                backend.modify_group(self.name, gid=self.gid)
            elif change.action == "remove":
                backend.delete_group(self.name)
            else:
                raise unknown_change(self, change)
