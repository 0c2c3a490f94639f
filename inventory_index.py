"""
Inventory Augment Index

Best augment HP per normalized item name across every owned copy. Used to
fill in augment HP for set entries that carry no augments={...} table.
"""

import threading
from typing import Dict, Optional

from augment_parser import hp_from_aug_strings, norm_item_key
from item_database import ItemDatabase
from extdata_decoder import ExtdataDecoder
from inventory_loader import Inventory


class InventoryAugmentIndex:
    """
    Lazily built, read-only cache of normalized name -> best augment HP.

    Built once on first query and never invalidated; construct a new index
    for each rewrite run that should see fresh inventory data.
    """

    def __init__(self, inventory: Optional[Inventory], item_db: ItemDatabase,
                 decoder: Optional[ExtdataDecoder] = None):
        self.inventory = inventory
        self.item_db = item_db
        self.decoder = decoder or ExtdataDecoder()
        self._best: Optional[Dict[str, int]] = None
        self._lock = threading.Lock()

    @property
    def is_built(self) -> bool:
        return self._best is not None

    def build(self) -> Dict[str, int]:
        """Build the index if needed and return it."""
        if self._best is None:
            with self._lock:
                if self._best is None:
                    self._best = self._scan()
        return self._best

    def _scan(self) -> Dict[str, int]:
        best: Dict[str, int] = {}
        if self.inventory is None:
            return best

        known_bags = set(self.item_db.bags())
        for entry in self.inventory.all_items():
            if entry.container not in known_bags or not entry.has_augment_payload:
                continue

            name = self.item_db.item_name(entry.item_id)
            if not name:
                continue

            augments = self.decoder.decode(entry)
            if not augments:
                continue

            hp = hp_from_aug_strings(augments)
            if hp <= 0:
                continue

            key = norm_item_key(name)
            if hp > best.get(key, 0):
                best[key] = hp

        return best

    def best_aug_hp(self, name: Optional[str]) -> int:
        """Best augment HP seen on any owned copy of the named item."""
        if not name:
            return 0
        return self.build().get(norm_item_key(name), 0)
