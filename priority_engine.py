"""
HP Priority Engine

Scores equipment by HP contribution. GearSwap equips items in priority
order, so high-HP pieces go on first when swapping sets and max HP is not
lost mid-swap.

priority = base HP + augment HP
    base HP:    item_mods HP + best HP+ / MP to HP in description and names
    augment HP: from augment text, raised to any fixed override below

Platinum Moogle Belt in the waist slot is special: it grants 10% max HP, so
its priority is max HP / 11 when max HP is known.
"""

import re
from typing import Optional

from models import EquippedItem, InventoryEntry, canonical_slot
from augment_parser import (
    hp_from_description, hp_from_aug_strings, parse_augment_table,
    norm_item_key, simple_key,
)
from item_database import ItemDatabase
from extdata_decoder import ExtdataDecoder
from inventory_index import InventoryAugmentIndex


# =============================================================================
# FIXED HP OVERRIDES (version 2025.9.17)
# =============================================================================
# Augments on these items are not tracked by resources or extdata.

# Unity rewards, exact (case-insensitive) names
UNITY_HP = {
    'unmoving collar +1': 200,
    'gelatinous ring +1': 100,
    'zwazo earring +1': 45,
    'montante +1': 100,
    'evalach +1': 150,
}

# JSE necks by enhancement tier, looked up by normalized name
JSE_NECK_HP = {
    "warrior's bead necklace": 50,
    "warrior's bead necklace +1": 75,
    "warrior's bead necklace +2": 100,
    "knight's bead necklace": 30,
    "knight's bead necklace +1": 45,
    "knight's bead necklace +2": 60,
    "futhark torque": 30,
    "futhark torque +1": 45,
    "futhark torque +2": 60,
}

JSE_NECK_HP_NORM = {norm_item_key(name): hp for name, hp in JSE_NECK_HP.items()}

PMOG_BELT_PATTERNS = [
    re.compile(r'plat\.\s*mog\.\s*belt'),
    re.compile(r'platinum\s+moogle\s+belt'),
]

PMOG_BELT_DIVISOR = 11


def is_pmog_belt(name: Optional[str]) -> bool:
    """True for any spelling of Platinum Moogle Belt."""
    key = simple_key(name)
    return any(p.search(key) for p in PMOG_BELT_PATTERNS)


def belt_priority(slot: str, name: Optional[str], max_hp: Optional[int]) -> Optional[int]:
    """Belt formula priority, or None when the formula does not apply."""
    if canonical_slot(slot) != 'waist' or not is_pmog_belt(name):
        return None
    if not max_hp or max_hp <= 0:
        return None
    return max_hp // PMOG_BELT_DIVISOR


def apply_overrides(name: Optional[str], aug_hp: int) -> int:
    """Raise augment HP to the Unity and JSE neck overrides (never lower it)."""
    cap_u = UNITY_HP.get(simple_key(name))
    if cap_u and cap_u > aug_hp:
        aug_hp = cap_u
    cap_j = JSE_NECK_HP_NORM.get(norm_item_key(name))
    if cap_j and cap_j > aug_hp:
        aug_hp = cap_j
    return aug_hp


class PriorityEngine:
    """
    Computes HP priorities from resources, augments and inventory.

    Args:
        item_db: Resource lookups (names, descriptions, HP mods)
        aug_index: Fallback augment HP for entries without augment text
        decoder: Augment decoder for inventory entries
    """

    def __init__(self, item_db: ItemDatabase,
                 aug_index: Optional[InventoryAugmentIndex] = None,
                 decoder: Optional[ExtdataDecoder] = None):
        self.item_db = item_db
        self.aug_index = aug_index
        self.decoder = decoder or ExtdataDecoder()

    def base_hp(self, item_id: Optional[int]) -> int:
        """Base HP from item_mods plus the best HP+ and MP to HP in the text."""
        if not item_id:
            return 0

        total = self.item_db.base_hp_mods(item_id)

        item = self.item_db.get_item(item_id)
        if item is not None:
            text = ' '.join([self.item_db.description(item_id), item.name or '', item.name_log or ''])
            total += hp_from_description(text)

        return total

    def base_hp_by_name(self, name: Optional[str]) -> int:
        return self.base_hp(self.item_db.id_by_name(name or ''))

    def compute_priority(self, item: Optional[EquippedItem], max_hp: Optional[int] = None) -> int:
        """Priority for a resolved item. Used when exporting current gear."""
        if item is None:
            return 0

        belt = belt_priority(item.slot, item.name, max_hp)
        if belt is not None:
            return belt

        return (item.base_hp or 0) + apply_overrides(item.name, item.aug_hp or 0)

    def compute_priority_for_name(self, slot: str, name: Optional[str],
                                  aug_text: Optional[str] = None,
                                  max_hp: Optional[int] = None) -> int:
        """
        Priority by name and optional augment table text.

        Used when rewriting job files. Without augment text the best
        augment HP among owned copies of the item is used.
        """
        if not name:
            return 0

        belt = belt_priority(slot, name, max_hp)
        if belt is not None:
            return belt

        base = self.base_hp_by_name(name)
        if aug_text is not None:
            aug = hp_from_aug_strings(parse_augment_table(aug_text))
        elif self.aug_index is not None:
            aug = self.aug_index.best_aug_hp(name)
        else:
            aug = 0

        return base + apply_overrides(name, aug)

    def snapshot_equipped(self, slot: str, entry: Optional[InventoryEntry]) -> Optional[EquippedItem]:
        """Snapshot a single equipped slot with base and augment HP."""
        if entry is None or not entry.item_id:
            return None

        name = self.item_db.item_name(entry.item_id) or f'Item {entry.item_id}'
        augments = self.decoder.decode(entry) if entry.has_augment_payload else []

        return EquippedItem(
            id=entry.item_id,
            name=name,
            slot=canonical_slot(slot),
            augments=augments,
            base_hp=self.base_hp(entry.item_id),
            aug_hp=hp_from_aug_strings(augments),
        )
