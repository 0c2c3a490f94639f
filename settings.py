"""
Runtime settings for the GearSwap Prioritizer.

Paths resolve with this precedence: explicit argument, then environment
variable, then a default next to the scripts.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


SCRIPT_DIR = Path(__file__).parent

ENV_RESOURCES_DIR = 'GSP_RESOURCES_DIR'
ENV_INVENTORY = 'GSP_INVENTORY'
ENV_EXPORT_DIR = 'GSP_EXPORT_DIR'


@dataclass(frozen=True)
class PrioritizerSettings:
    """
    Where the prioritizer finds its resources and writes exports.

    resources_dir holds Windower's items.lua, item_descriptions.lua,
    item_mods.lua and augments.lua. inventory_path points to an inventory
    CSV dump; without it the inventory augment index stays empty.
    """
    resources_dir: Path
    inventory_path: Optional[Path] = None
    export_dir: Path = SCRIPT_DIR / 'data' / 'export'

    @property
    def items_path(self) -> Path:
        return self.resources_dir / 'items.lua'

    @property
    def descriptions_path(self) -> Path:
        return self.resources_dir / 'item_descriptions.lua'

    @property
    def item_mods_path(self) -> Path:
        return self.resources_dir / 'item_mods.lua'

    @property
    def augments_path(self) -> Path:
        return self.resources_dir / 'augments.lua'


def _expand(val: Optional[str]) -> Optional[Path]:
    if not val or not val.strip():
        return None
    return Path(os.path.expanduser(val.strip()))


def resolve_settings(resources_dir: Optional[str] = None,
                     inventory_path: Optional[str] = None,
                     export_dir: Optional[str] = None) -> PrioritizerSettings:
    """Build settings from arguments, environment and defaults."""
    resources = _expand(resources_dir) or _expand(os.environ.get(ENV_RESOURCES_DIR)) or SCRIPT_DIR / 'resources'
    inventory = _expand(inventory_path) or _expand(os.environ.get(ENV_INVENTORY))
    export = _expand(export_dir) or _expand(os.environ.get(ENV_EXPORT_DIR)) or SCRIPT_DIR / 'data' / 'export'

    return PrioritizerSettings(
        resources_dir=resources,
        inventory_path=inventory,
        export_dir=export,
    )
