"""Remote profile reconciliation."""

from .reconciler import ProfileReconciler, ProfileValues

__all__ = ["ProfileReconciler", "ProfileValues"]
