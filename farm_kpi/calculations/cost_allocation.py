"""Allocation of shared (non-feed) cycle costs to area groups."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class AllocationBasis:
    """
    Quantities a strategy may allocate by.

    Attributes:
        animal_count: Animals in the group
        animal_days: Animal-days spent in the group
    """
    animal_count: int
    animal_days: int = 0


class CostAllocationStrategy(ABC):
    """Distributes a shared cost over groups, returned per animal."""

    @abstractmethod
    def allocate_per_animal(
        self,
        total_cost: float,
        groups: Dict[str, AllocationBasis]
    ) -> Dict[str, float]:
        """
        Allocate a shared cost.

        Args:
            total_cost: Cost to distribute
            groups: Allocation basis keyed by group key

        Returns:
            Allocated cost per animal keyed by group key
        """


class HeadCountAllocation(CostAllocationStrategy):
    """
    Allocate by each group's share of the total head count.

    Every animal absorbs the same per-head share, whichever group it is in:
    group allocation = total × (group animals / all animals), divided by
    the group's animals.
    """

    def allocate_per_animal(
        self,
        total_cost: float,
        groups: Dict[str, AllocationBasis]
    ) -> Dict[str, float]:
        total_animals = sum(basis.animal_count for basis in groups.values())
        allocation: Dict[str, float] = {}
        for key, basis in groups.items():
            if total_animals > 0 and basis.animal_count > 0:
                share = basis.animal_count / total_animals
                allocation[key] = (total_cost * share) / basis.animal_count
            else:
                allocation[key] = 0.0
        return allocation
