"""
User resource — local accounts.

Group membership is additive: listed supplementary groups are joined,
groups the user already belongs to are never left. The groups must exist
(declare them under ``groups:``; groups are processed before users).
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Literal

from pydantic import Field, model_validator

from accord.core.models.resource import Change, ResourceKind
from accord.core.resources.base import ExecutionContext, Resource, unknown_change

logger = logging.getLogger(__name__)

_MODIFY_FIELDS = {"set uid": "uid", "set home": "home", "set shell": "shell"}


class User(Resource):
    kind: ClassVar[ResourceKind] = ResourceKind.USER

    name: str
    uid: int | None = None
    groups: frozenset[str] = Field(default_factory=frozenset)
    shell: str = "/bin/bash"
    home: str = ""
    state: Literal["present", "absent"] = "present"

    @model_validator(mode="before")
    @classmethod
    def _default_home(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("home") and data.get("name"):
            data = {**data, "home": f"/home/{data['name']}"}
        return data

    @property
    def key(self) -> str:
        return self.name

    def plan(self, ctx: ExecutionContext) -> list[Change]:
        current = ctx.backends.accounts(ctx.capabilities).get_user(self.name)

        if self.state == "absent":
            return [Change("remove")] if current is not None else []
        if current is None:
            return [Change("create")]

        changes: list[Change] = []
        if self.uid is not None and current.uid != self.uid:
            changes.append(Change("set uid", str(self.uid)))
        if current.home != self.home:
            changes.append(Change("set home", self.home))
        if current.shell != self.shell:
            changes.append(Change("set shell", self.shell))

        missing = self.groups - current.groups
        if missing:
            changes.append(Change("add to groups", ",".join(sorted(missing))))
        return changes

    def converge(self, ctx: ExecutionContext, changes: list[Change]) -> None:
        backend = ctx.backends.accounts(ctx.capabilities)
        modify: dict[str, Any] = {}

        for change in changes:
            if change.action == "create":
                backend.create_user(
                    self.name,
                    uid=self.uid,
                    home=self.home,
                    shell=self.shell,
                    groups=sorted(self.groups),
                )
            elif change.action in _MODIFY_FIELDS:
                field = _MODIFY_FIELDS[change.action]
                modify[field] = getattr(self, field)
            elif change.action == "add to groups":
                backend.add_to_groups(self.name, change.detail.split(","))
            elif change.action == "remove":
                backend.delete_user(self.name)
            else:
                raise unknown_change(self, change)

        # one usermod for all attribute changes
        if modify:
            backend.modify_user(self.name, **modify)
