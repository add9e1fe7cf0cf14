"""
Reconciliation engine — the central loop.

Walks every resource of a manifest in processing order (kinds in fixed
order, declaration order within a kind), checks it, applies it when it
differs, and accumulates a ``RunSummary``.

Flow per resource:
    check → satisfied?  count and move on
          → needs change → apply → count applied (or satisfied on a race)
    any failure → record it; abort the run unless ``allow_failure``

The engine does no I/O of its own: resources talk to the host through
backends, and user-facing output goes to the injected reporter.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from accord.adapters.registry import BackendRegistry
from accord.core.errors import AccordError, CheckFailed, OperationFailed
from accord.core.models.capabilities import SystemCapabilities
from accord.core.models.manifest import Manifest
from accord.core.models.resource import ResourceResult, ResourceState
from accord.core.models.summary import ResourceError, RunSummary
from accord.core.resources.base import ExecutionContext, Resource

if TYPE_CHECKING:
    from accord.core.observability.reporter import RunReporter

logger = logging.getLogger(__name__)


class _ResourceFailed(Exception):
    """Internal: carries the phase a resource failed in."""

    def __init__(self, phase: str, error: AccordError):
        self.phase = phase
        self.error = error


def reconcile(
    manifest: Manifest,
    capabilities: SystemCapabilities,
    dry_run: bool = False,
    *,
    backends: BackendRegistry | None = None,
    reporter: RunReporter | None = None,
) -> RunSummary:
    """Bring the host in line with ``manifest``.

    Args:
        manifest: The declared resources.
        capabilities: Detected platform capabilities.
        dry_run: Report what would change without changing anything.
        backends: Backend registry (default: every built-in backend).
        reporter: Receives per-resource outcomes for display.

    Returns:
        RunSummary. After a fail-fast abort, ``total`` counts the resources
        visited up to and including the failing one.
    """
    ctx = ExecutionContext(
        capabilities=capabilities,
        backends=backends if backends is not None else BackendRegistry.default(),
    )
    summary = RunSummary(dry_run=dry_run)

    logger.debug(
        "Reconciling %d resource(s) from %s%s",
        len(manifest),
        manifest.source,
        " (dry run)" if dry_run else "",
    )
    if reporter is not None:
        reporter.start(len(manifest), dry_run)

    for resource in manifest.iter_resources():
        summary.total += 1
        label = str(resource)

        try:
            result = _reconcile_one(resource, ctx, dry_run, reporter)
        except _ResourceFailed as failure:
            error = _to_resource_error(resource, failure)
            summary.failed += 1
            summary.errors.append(error)

            if resource.allow_failure:
                logger.debug("%s failed (allowed): %s", label, error.message)
                if reporter is not None:
                    reporter.failed(label, error, continuing=True)
                continue

            logger.debug("%s failed, aborting run: %s", label, error.message)
            if reporter is not None:
                reporter.failed(label, error, continuing=False)
            summary.aborted = True
            summary.abort_error = error
            break

        if result is None or not result.changed:
            summary.satisfied += 1
        else:
            summary.applied += 1

    logger.debug(
        "Run %s: total=%d satisfied=%d applied=%d failed=%d",
        summary.status,
        summary.total,
        summary.satisfied,
        summary.applied,
        summary.failed,
    )
    if reporter is not None:
        reporter.summary(summary)
    return summary


def _reconcile_one(
    resource: Resource,
    ctx: ExecutionContext,
    dry_run: bool,
    reporter: RunReporter | None,
) -> ResourceResult | None:
    """Check and, if needed, apply one resource.

    Returns None when the check found nothing to do, otherwise the apply
    result. Raises ``_ResourceFailed`` on any failure.
    """
    label = str(resource)

    state = _guard("check", resource, lambda: resource.check(ctx))
    if state is ResourceState.FAILED:
        raise _ResourceFailed("check", CheckFailed("current state could not be determined"))
    logger.debug("%s: %s", label, state.value)
    if reporter is not None:
        reporter.checked(label, state)

    if state is ResourceState.SATISFIED:
        return None

    result = _guard("apply", resource, lambda: resource.apply(ctx, dry_run=dry_run))
    if result.state is ResourceState.FAILED:
        raise _ResourceFailed("apply", OperationFailed(result.message or "apply failed"))
    if not result.changed:
        logger.debug("%s converged before apply; nothing changed", label)
    if reporter is not None:
        reporter.applied(label, result, dry_run)
    return result


def _guard(phase: str, resource: Resource, call):
    try:
        return call()
    except AccordError as e:
        raise _ResourceFailed(phase, e) from e
    except Exception as e:
        logger.exception("Unexpected error during %s of %s", phase, resource)
        raise _ResourceFailed(phase, OperationFailed(f"unexpected error: {e}")) from e


def _to_resource_error(resource: Resource, failure: _ResourceFailed) -> ResourceError:
    return ResourceError(
        kind=resource.kind.value,
        key=resource.key,
        error_type=type(failure.error).__name__,
        message=str(failure.error),
        phase=failure.phase,
        exit_code=failure.error.exit_code,
    )
