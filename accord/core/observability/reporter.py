"""
Run reporter — user-facing, per-resource progress output.

Diagnostics go through ``logging``; what a person running ``accord apply``
reads goes through a ``RunReporter``. The caller builds one and hands it
to the engine, so there is no process-wide output state and tests can
capture or replace it.

Verbosity by run level:
    quiet    errors and the final summary
    normal   + resources that were (or would be) changed
    verbose  + every check result
    debug    + resources that were already satisfied
"""

from __future__ import annotations

import os

import click

from accord.core.models.resource import ResourceResult, ResourceState
from accord.core.models.summary import ResourceError, RunSummary

_RANK = {"quiet": 0, "normal": 1, "verbose": 2, "debug": 3}

_STATUS_COLORS = {"ok": "green", "partial": "yellow", "failed": "red", "aborted": "red"}


def color_enabled(configured: bool = True) -> bool:
    """Colour is off when NO_COLOR is set or the settings disable it."""
    return configured and "NO_COLOR" not in os.environ


class RunReporter:
    """Prints resource outcomes with ``click.secho``."""

    def __init__(self, level: str = "verbose", color: bool = True):
        self.level = level if level in _RANK else "verbose"
        self.color = color

    def _at(self, level: str) -> bool:
        return _RANK[self.level] >= _RANK[level]

    def _say(self, message: str, **style) -> None:
        # color=None lets click strip styles when stdout is not a terminal
        click.secho(message, color=None if self.color else False, **style)

    # ── Engine callbacks ────────────────────────────────────────

    def start(self, total: int, dry_run: bool) -> None:
        if self._at("verbose"):
            mode = " (dry run)" if dry_run else ""
            self._say(f"🔍 Reconciling {total} resource(s){mode}", fg="cyan", bold=True)

    def checked(self, label: str, state: ResourceState) -> None:
        if state is ResourceState.SATISFIED:
            if self._at("debug"):
                self._say(f"   ✓ {label}", fg="green")
        elif self._at("verbose"):
            self._say(f"   • {label}: {state.value.replace('_', ' ')}")

    def applied(self, label: str, result: ResourceResult, dry_run: bool) -> None:
        if not result.changed:
            if self._at("verbose"):
                self._say(f"   ✓ {label}: no change needed")
            return
        if self._at("normal"):
            if dry_run:
                self._say(f"   ~ {label}: {result.message}", fg="yellow")
            else:
                self._say(f"   ✓ {label}: {result.message}", fg="green")

    def failed(self, label: str, error: ResourceError, continuing: bool) -> None:
        self._say(f"❌ {label}: {error.message}", fg="red")
        if continuing and self._at("normal"):
            self._say("   (allow_failure set, continuing)", fg="yellow")

    def summary(self, summary: RunSummary) -> None:
        color = _STATUS_COLORS.get(summary.status, "white")
        prefix = "Dry run" if summary.dry_run else "Done"
        applied = "would change" if summary.dry_run else "applied"
        self._say(
            f"{prefix}: {summary.total} checked, {summary.satisfied} satisfied, "
            f"{summary.applied} {applied}, {summary.failed} failed",
            fg=color,
            bold=True,
        )
        if summary.aborted and summary.abort_error is not None:
            err = summary.abort_error
            self._say(f"   Aborted at {err.kind} {err.key}", fg="red")
