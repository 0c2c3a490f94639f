"""
Data models for GearSwap Prioritizer

Defines the core data structures for items, inventory entries, gear slots
and the player state used when computing HP priorities.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Dict, List


class Slot(IntEnum):
    """Equipment slot IDs matching FFXI/GearSwap conventions."""
    MAIN = 0
    SUB = 1
    RANGE = 2
    AMMO = 3
    HEAD = 4
    BODY = 5
    HANDS = 6
    LEGS = 7
    FEET = 8
    NECK = 9
    WAIST = 10
    LEFT_EAR = 11
    RIGHT_EAR = 12
    LEFT_RING = 13
    RIGHT_RING = 14
    BACK = 15


# GearSwap slot names
SLOT_NAMES = {
    Slot.MAIN: 'main',
    Slot.SUB: 'sub',
    Slot.RANGE: 'range',
    Slot.AMMO: 'ammo',
    Slot.HEAD: 'head',
    Slot.BODY: 'body',
    Slot.HANDS: 'hands',
    Slot.LEGS: 'legs',
    Slot.FEET: 'feet',
    Slot.NECK: 'neck',
    Slot.WAIST: 'waist',
    Slot.LEFT_EAR: 'left_ear',
    Slot.RIGHT_EAR: 'right_ear',
    Slot.LEFT_RING: 'left_ring',
    Slot.RIGHT_RING: 'right_ring',
    Slot.BACK: 'back',
}

# Short spellings GearSwap accepts for the ear/ring slots
SLOT_ALIASES = {
    'ear1': 'left_ear',
    'ear2': 'right_ear',
    'lear': 'left_ear',
    'rear': 'right_ear',
    'ring1': 'left_ring',
    'ring2': 'right_ring',
    'lring': 'left_ring',
    'rring': 'right_ring',
}

# Every key the set rewriter recognizes as an equipment slot
SLOT_KEYS = frozenset(SLOT_NAMES.values()) | frozenset(SLOT_ALIASES)

# Order of lines in an exported set (matches GearSwap's own export)
EXPORT_SLOT_ORDER = [
    'main', 'sub', 'range', 'ammo', 'head', 'body', 'hands', 'legs', 'feet',
    'neck', 'waist', 'left_ear', 'right_ear', 'left_ring', 'right_ring', 'back',
]


def canonical_slot(key: str) -> str:
    """Resolve a slot key (possibly an alias) to its canonical name."""
    return SLOT_ALIASES.get(key, key)


class Container(IntEnum):
    """Inventory container IDs."""
    INVENTORY = 0
    SAFE = 1
    STORAGE = 2
    TEMPORARY = 3
    LOCKER = 4
    SATCHEL = 5
    SACK = 6
    CASE = 7
    WARDROBE = 8
    SAFE2 = 9
    WARDROBE2 = 10
    WARDROBE3 = 11
    WARDROBE4 = 12
    WARDROBE5 = 13
    WARDROBE6 = 14
    WARDROBE7 = 15
    WARDROBE8 = 16
    RECYCLE = 17


CONTAINER_NAMES = {c: c.name.lower() for c in Container}


@dataclass
class ItemBase:
    """
    Base item data from the Windower resource files.

    This represents the static item definition, not an instance.
    """
    id: int
    name: str
    name_log: str = ''
    description: str = ''

    # Entries from item_mods: [{'mod': 'HP', 'value': 30}, ...]
    hp_mods: List[Dict] = field(default_factory=list)

    slots: int = 0      # Slot bitmask


@dataclass
class InventoryEntry:
    """
    A single owned copy of an item, as dumped from a storage container.
    """
    item_id: int
    container: Container
    index: int

    # Raw augment payloads
    augments_text: str = ''     # Semicolon separated text augments
    extdata: str = ''           # Hex encoded extdata

    # GearSwap slot name when the item is currently equipped
    equip_slot: str = ''

    @property
    def has_augment_payload(self) -> bool:
        if self.augments_text.strip():
            return True
        return bool(self.extdata) and self.extdata.strip('0') != ''


@dataclass
class EquippedItem:
    """Snapshot of one equipped slot with base and augment HP."""
    id: int
    name: str
    slot: str
    augments: List[str] = field(default_factory=list)
    base_hp: int = 0
    aug_hp: int = 0


@dataclass
class PlayerState:
    """What the prioritizer needs to know about the player."""
    name: str = 'PLAYER'
    max_hp: Optional[int] = None
