"""Item reference data.

The registry maps item ids to how much of each need they satisfy. It is
read-only from the decision engine's point of view; hosts can register extra
items before a simulation starts.
"""

from typing import Dict, Iterator, List, Optional

from pydantic import BaseModel, Field, field_validator

from .schemas import NeedType


class ItemType(BaseModel):
    """Describe one item kind and the needs it reduces when consumed."""

    item_id: str = Field(..., description="Unique item identifier (e.g. 'water')")
    # Positive magnitudes: consuming 'water' lowers thirst by 30
    satisfies: Dict[NeedType, float] = Field(
        default_factory=dict, description="NeedType -> amount the need drops on consumption"
    )
    base_price: float = Field(1.0, ge=0, description="Fallback price when nothing better is known")

    @field_validator("satisfies")
    @classmethod
    def _positive_amounts(cls, value: Dict[NeedType, float]) -> Dict[NeedType, float]:
        return {need: abs(amount) for need, amount in value.items()}

    def satisfaction(self, need: NeedType) -> float:
        return self.satisfies.get(NeedType(need), 0.0)


def default_item_types() -> List[ItemType]:
    return [
        ItemType(item_id="water", satisfies={NeedType.THIRST: 30.0}, base_price=1.0),
        ItemType(item_id="food", satisfies={NeedType.HUNGER: 25.0}, base_price=2.0),
        ItemType(item_id="grass", satisfies={NeedType.HUNGER: 15.0}, base_price=0.5),
        ItemType(item_id="rabbit_meat", satisfies={NeedType.HUNGER: 40.0}, base_price=4.0),
    ]


class ItemRegistry:
    """Lookup table of ItemType by id."""

    def __init__(self, items: Optional[List[ItemType]] = None) -> None:
        self._items: Dict[str, ItemType] = {}
        for item in items if items is not None else default_item_types():
            self.register(item)

    @classmethod
    def empty(cls) -> "ItemRegistry":
        return cls(items=[])

    def register(self, item: ItemType) -> None:
        """Add or replace an item definition."""
        self._items[item.item_id] = item

    def lookup(self, item_id: str) -> Optional[ItemType]:
        return self._items.get(item_id)

    def items_satisfying(self, need: NeedType) -> List[ItemType]:
        """Items that reduce ``need``, strongest first (ties by id for determinism)."""
        matches = [item for item in self._items.values() if item.satisfaction(need) > 0]
        return sorted(matches, key=lambda item: (-item.satisfaction(need), item.item_id))

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __iter__(self) -> Iterator[ItemType]:
        return iter(sorted(self._items.values(), key=lambda item: item.item_id))

    def __len__(self) -> int:
        return len(self._items)
