"""Shared fixtures: a small resource database and inventory."""

import pytest

from models import ItemBase, InventoryEntry, Container
from item_database import ItemDatabase
from inventory_loader import Inventory
from inventory_index import InventoryAugmentIndex
from extdata_decoder import ExtdataDecoder
from priority_engine import PriorityEngine


RESOURCE_ITEMS = [
    ItemBase(id=23761, name="Nyame Helm", name_log="Nyame helm", description="DEF:127 STR+26 Accuracy+40"),
    ItemBase(id=26015, name="Sibyl Scarf", description="MP+30 INT+5"),
    ItemBase(id=26335, name="Plat. Mog. Belt", name_log="platinum moogle belt",
             description="DEF:11 Maximum HP +10%", hp_mods=[{'mod': 'HP', 'value': 0}]),
    ItemBase(id=23520, name="Odyssean Helm", description="DEF:110 STR+21 VIT+20",
             hp_mods=[{'mod': 'HP', 'value': 30}]),
    ItemBase(id=25441, name="Bloodbead Gorget", description='HP+60 HP+20 while in Dynamis "Regen"+1'),
    ItemBase(id=26049, name="Unmoving Collar +1", description="DEF:10 Enmity+10"),
    ItemBase(id=25429, name="Warrior's Bead Necklace +2", description="DEF:10 Accuracy+30"),
    ItemBase(id=26190, name="Mephitas's Ring +1", description="MP+110 Converts 110 MP to HP"),
    ItemBase(id=21694, name="Rudianos's Mantle", description="DEF:20 Enmity+10"),
]


@pytest.fixture
def item_db():
    db = ItemDatabase()
    for item in RESOURCE_ITEMS:
        db.add_item(item)
    return db


@pytest.fixture
def inventory():
    inv = Inventory()
    inv.add_entry(InventoryEntry(item_id=23520, container=Container.WARDROBE, index=1,
                                 augments_text="HP+50;Accuracy+10"))
    inv.add_entry(InventoryEntry(item_id=23520, container=Container.WARDROBE2, index=4,
                                 augments_text="HP+20"))
    inv.add_entry(InventoryEntry(item_id=21694, container=Container.WARDROBE3, index=7,
                                 augments_text="HP+60;Eva.+20;Mag. Eva.+20;Enmity+10",
                                 equip_slot='back'))
    inv.add_entry(InventoryEntry(item_id=26335, container=Container.WARDROBE, index=2,
                                 equip_slot='waist'))
    inv.add_entry(InventoryEntry(item_id=26015, container=Container.INVENTORY, index=3,
                                 equip_slot='neck'))
    return inv


@pytest.fixture
def engine(item_db, inventory):
    decoder = ExtdataDecoder()
    return PriorityEngine(item_db, InventoryAugmentIndex(inventory, item_db, decoder), decoder)
