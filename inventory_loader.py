"""
Inventory Loader

Loads inventory CSV dumps into InventoryEntry records.

Expected columns: item_id, container_id, slot, and optionally augments
(semicolon separated), extdata (hex) and equip_slot (GearSwap slot name of
an equipped item).
"""

import csv
from pathlib import Path
from typing import Dict, List, Optional

from models import InventoryEntry, Container, canonical_slot


class Inventory:
    """
    Represents a player's inventory state.

    Contains every owned item loaded from CSV, indexed by container.
    """

    def __init__(self):
        self.items: List[InventoryEntry] = []
        self.items_by_container: Dict[Container, List[InventoryEntry]] = {}

    def load_from_csv(self, csv_path: str):
        """
        Load inventory from CSV file.

        Args:
            csv_path: Path to inventory CSV file
        """
        self.items.clear()
        self.items_by_container.clear()

        with open(csv_path, 'r', encoding='utf-8', newline='') as f:
            reader = csv.DictReader(f)

            for row in reader:
                entry = self._parse_row(row)
                if entry is not None:
                    self.add_entry(entry)

    def _parse_row(self, row: Dict[str, str]) -> Optional[InventoryEntry]:
        """Parse a CSV row into an InventoryEntry."""
        try:
            item_id = int(row['item_id'])
            container = Container(int(row['container_id']))
            index = int(row.get('slot') or 0)
        except (KeyError, ValueError, TypeError) as e:
            print(f"Warning: Failed to parse row: {e}")
            return None

        if item_id == 0:
            return None

        equip_slot = (row.get('equip_slot') or '').strip().lower()

        return InventoryEntry(
            item_id=item_id,
            container=container,
            index=index,
            augments_text=row.get('augments') or '',
            extdata=(row.get('extdata') or '').strip(),
            equip_slot=canonical_slot(equip_slot) if equip_slot else '',
        )

    def add_entry(self, entry: InventoryEntry):
        """Add an entry to the inventory indexes."""
        self.items.append(entry)
        self.items_by_container.setdefault(entry.container, []).append(entry)

    def all_items(self) -> List[InventoryEntry]:
        """Every owned entry, container by container."""
        return list(self.items)

    def equipped(self) -> Dict[str, InventoryEntry]:
        """Currently equipped entries keyed by canonical slot name."""
        return {entry.equip_slot: entry for entry in self.items if entry.equip_slot}


def load_inventory(csv_path: str) -> Inventory:
    """
    Convenience function to load an inventory.

    Args:
        csv_path: Path to inventory CSV file

    Returns:
        Loaded Inventory object
    """
    inv = Inventory()
    inv.load_from_csv(str(Path(csv_path)))
    return inv
