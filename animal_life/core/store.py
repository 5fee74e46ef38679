"""
Animal Life — Economy Stores
Coin balance and inventory items that care, treatment and collection draw on.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Callable, Tuple
from enum import Enum, auto
import logging

logger = logging.getLogger(__name__)


COINS = "coins"


class ResourceType(Enum):
    """Kinds of stores held by the economy."""
    CURRENCY = auto()
    FEED = auto()
    MEDICINE = auto()
    SUPPLY = auto()  # Brushes, toys, bedding


@dataclass
class Cost:
    """Price of an action: coins plus optional inventory items."""
    coins: float = 0.0
    items: Dict[str, float] = field(default_factory=dict)

    @property
    def is_free(self) -> bool:
        return self.coins <= 0 and not self.items

    def to_dict(self) -> dict:
        return {"coins": self.coins, "items": dict(self.items)}


@dataclass
class Store:
    """
    A single balance: the coin purse or one inventory item.

    Tracks lifetime inflow/outflow and fires on_empty when drained.
    """

    name: str
    resource_type: ResourceType
    current_level: float = 0.0
    capacity: float = float("inf")

    total_inflow: float = 0.0
    total_outflow: float = 0.0

    on_empty: Optional[Callable] = None

    def __post_init__(self):
        if self.current_level > self.capacity:
            logger.warning(f"{self.name}: Initial level {self.current_level} exceeds capacity {self.capacity}")
            self.current_level = self.capacity
        if self.current_level < 0:
            logger.warning(f"{self.name}: Negative initial level {self.current_level}, starting empty")
            self.current_level = 0.0

    @property
    def is_empty(self) -> bool:
        return self.current_level <= 0.0

    def add(self, amount: float) -> float:
        """
        Add to the store.

        Returns:
            Amount actually added (capped by capacity).
        """
        if amount < 0:
            raise ValueError(f"Cannot add negative amount: {amount}")

        actual_add = min(amount, self.capacity - self.current_level)
        self.current_level += actual_add
        self.total_inflow += actual_add
        return actual_add

    def remove(self, amount: float) -> float:
        """
        Remove from the store.

        Returns:
            Amount actually removed (never more than the current level).
        """
        if amount < 0:
            raise ValueError(f"Cannot remove negative amount: {amount}")

        actual_remove = min(amount, self.current_level)
        self.current_level -= actual_remove
        self.total_outflow += actual_remove

        if self.is_empty and self.on_empty:
            self.on_empty(self)

        return actual_remove

    def get_status(self) -> dict:
        return {
            "name": self.name,
            "resource_type": self.resource_type.name,
            "current_level": self.current_level,
            "total_inflow": self.total_inflow,
            "total_outflow": self.total_outflow,
        }

    def __repr__(self) -> str:
        return f"Store({self.name}: {self.current_level:.1f} {self.resource_type.name})"


class Economy:
    """
    The economy sink shared by every subsystem.

    Coins are a store like any other item; costs are checked as a whole
    before anything is withdrawn.
    """

    def __init__(self, starting_coins: float = 0.0):
        self.stores: Dict[str, Store] = {}
        self.ledger: List[Dict] = []
        self.add_store(Store(COINS, ResourceType.CURRENCY, current_level=starting_coins))

    def add_store(self, store: Store):
        self.stores[store.name] = store

    def get(self, name: str) -> Optional[Store]:
        return self.stores.get(name)

    @property
    def coins(self) -> float:
        return self.stores[COINS].current_level

    def item_count(self, name: str) -> float:
        store = self.stores.get(name)
        return store.current_level if store else 0.0

    def has_item(self, name: str, quantity: float = 1.0) -> bool:
        return self.item_count(name) >= quantity

    def add_item(self, name: str, quantity: float = 1.0,
                 resource_type: ResourceType = ResourceType.SUPPLY) -> float:
        if name not in self.stores:
            self.add_store(Store(name, resource_type))
        return self.stores[name].add(quantity)

    def can_afford(self, cost: Cost) -> Tuple[bool, str]:
        """Check a cost without withdrawing anything."""
        if cost.coins > self.coins:
            return False, f"Not enough coins (need {cost.coins:g}, have {self.coins:g})"
        for item, quantity in cost.items.items():
            if not self.has_item(item, quantity):
                return False, f"Not enough {item} (need {quantity:g})"
        return True, ""

    def spend(self, cost: Cost, reason: str = "") -> bool:
        """Withdraw a cost in full, or nothing if it cannot be covered."""
        affordable, why = self.can_afford(cost)
        if not affordable:
            logger.debug(f"Economy: cannot spend for {reason or 'purchase'} - {why}")
            return False

        if cost.coins > 0:
            self.stores[COINS].remove(cost.coins)
        for item, quantity in cost.items.items():
            self.stores[item].remove(quantity)

        self.ledger.append({"kind": "spend", "reason": reason, **cost.to_dict()})
        return True

    def credit(self, coins: float, reason: str = "") -> float:
        """Credit coins earned by the herd."""
        added = self.stores[COINS].add(coins)
        self.ledger.append({"kind": "credit", "reason": reason, "coins": added, "items": {}})
        logger.debug(f"Economy: +{added:.2f} coins ({reason})")
        return added

    def get_all_status(self) -> dict:
        return {name: store.get_status() for name, store in self.stores.items()}

    def save(self) -> dict:
        return {
            name: {"resource_type": store.resource_type.name, "level": store.current_level}
            for name, store in self.stores.items()
        }

    def load(self, state: dict):
        for name, entry in state.items():
            resource_type = ResourceType[entry.get("resource_type", ResourceType.SUPPLY.name)]
            self.stores[name] = Store(name, resource_type, current_level=entry.get("level", 0.0))
