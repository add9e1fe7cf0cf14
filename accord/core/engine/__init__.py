"""Engine — reconciliation of a manifest against the host."""

from accord.core.engine.reconciler import reconcile

__all__ = ["reconcile"]
