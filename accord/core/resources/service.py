"""Service resource — running state and boot enablement."""

from __future__ import annotations

from typing import ClassVar, Literal

from accord.core.models.resource import Change, ResourceKind
from accord.core.resources.base import ExecutionContext, Resource, unknown_change


class Service(Resource):
    """A system service managed through the detected init system."""

    kind: ClassVar[ResourceKind] = ResourceKind.SERVICE

    name: str
    state: Literal["running", "stopped"] = "running"
    enabled: bool = True

    @property
    def key(self) -> str:
        return self.name

    def plan(self, ctx: ExecutionContext) -> list[Change]:
        status = ctx.backends.services(ctx.capabilities).status(self.name)
        changes: list[Change] = []

        # enablement is changed before the running state
        if self.enabled and not status.enabled:
            changes.append(Change("enable"))
        elif not self.enabled and status.enabled:
            changes.append(Change("disable"))

        want_running = self.state == "running"
        if want_running and not status.running:
            changes.append(Change("start"))
        elif not want_running and status.running:
            changes.append(Change("stop"))

        return changes

    def converge(self, ctx: ExecutionContext, changes: list[Change]) -> None:
        backend = ctx.backends.services(ctx.capabilities)
        actions = {
            "enable": backend.enable,
            "disable": backend.disable,
            "start": backend.start,
            "stop": backend.stop,
        }
        for change in changes:
            action = actions.get(change.action)
            if action is None:
                raise unknown_change(self, change)
            action(self.name)
