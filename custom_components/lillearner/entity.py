"""Base entity classes for LilLearner integration."""

from __future__ import annotations

from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .coordinator import LilLearnerDataCoordinator


class LilLearnerCoordinatorEntity(CoordinatorEntity[LilLearnerDataCoordinator]):
    """Base entity class for LilLearner sensors with typed coordinator access."""

    @property
    def coordinator(self) -> LilLearnerDataCoordinator:
        """Return typed coordinator.

        Uses object.__getattribute__ to reach the _coordinator attribute set
        by CoordinatorEntity, keeping self.coordinator strongly typed.
        """
        return object.__getattribute__(self, "_coordinator")

    @coordinator.setter
    def coordinator(self, value: LilLearnerDataCoordinator) -> None:
        """Set coordinator with proper typing."""
        object.__setattr__(self, "_coordinator", value)
