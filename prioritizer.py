#!/usr/bin/env python3
"""
GearSwap Prioritizer

Writes HP priorities into GearSwap job files so high-HP gear is equipped
first when swapping sets.

Usage:
    python prioritizer.py create data/PLD.lua [--max-hp 2786]
        Clones the job file to PLD-p.lua with priority=N on every slot entry.
    python prioritizer.py export-p --player Name [--max-hp 2786]
        Exports the currently equipped gear as a prioritized set file.

Notes:
    * Some items' augments are not tracked by resources or extdata (Unity
      rewards, JSE necks); those use fixed HP overrides.
    * Platinum Moogle Belt priority = max HP / 11 at the time of the run.
"""

import argparse
import os
import sys
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from models import PlayerState, EXPORT_SLOT_ORDER
from item_database import ItemDatabase, load_database
from extdata_decoder import load_decoder
from inventory_loader import Inventory, load_inventory
from inventory_index import InventoryAugmentIndex
from priority_engine import PriorityEngine
from lua_parser import (
    LuaParseError,
    find_slot_assignment,
    extract_name_and_aug,
    inject_priority_rhs,
    priority_in,
    build_item_line,
)
from settings import PrioritizerSettings, resolve_settings


class PrioritizeError(RuntimeError):
    """A prioritize run could not read its input or write its output."""


@dataclass
class TransformResult:
    """Outcome of rewriting one document."""
    text: str
    changed: int        # Priorities added or changed
    assignments: int    # Slot assignments visited


# =============================================================================
# Document Transformer
# =============================================================================

def transform_all_sets(src: str, engine: PriorityEngine,
                       max_hp: Optional[int] = None) -> TransformResult:
    """
    Rewrite every slot assignment in src with its computed priority.

    Text outside slot values is copied byte for byte. Running this on its
    own output with the same data gives the same text and zero changes.

    Raises:
        LuaParseError: a slot value is empty or unterminated
    """
    out: List[str] = []
    pos = 0
    changed = 0
    visited = 0

    while True:
        assignment = find_slot_assignment(src, pos)
        if assignment is None:
            out.append(src[pos:])
            break

        rhs = src[assignment.value_start:assignment.value_end]
        if assignment.value_end <= assignment.value_start or not rhs.strip():
            raise LuaParseError(f"Missing value for '{assignment.key}'", assignment.value_start)
        if not assignment.closed:
            raise LuaParseError(f"Unterminated value for '{assignment.key}'", assignment.value_start)

        out.append(src[pos:assignment.value_start])

        name, aug_text = extract_name_and_aug(rhs)
        priority = engine.compute_priority_for_name(assignment.slot, name, aug_text, max_hp) if name else 0
        new_rhs = inject_priority_rhs(rhs, priority)

        had = priority_in(rhs)
        will = priority_in(new_rhs)
        if will is not None and will != had:
            changed += 1

        out.append(new_rhs)
        visited += 1
        pos = assignment.value_end

    return TransformResult(text=''.join(out), changed=changed, assignments=visited)


def prioritized_path(src_path: Path) -> Path:
    """PLD.lua -> PLD-p.lua"""
    if src_path.suffix.lower() == '.lua':
        return src_path.with_name(f'{src_path.stem}-p.lua')
    return src_path.with_name(f'{src_path.name}-p.lua')


def _write_atomic(path: Path, content: str):
    """Write the whole buffer to a temp file, then move it into place."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f'.{path.name}.', suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
                f.write(content)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
    except OSError as e:
        raise PrioritizeError(f"Write failed: {path} ({e})") from e


def create_prioritized_file(src_path, engine: PriorityEngine, max_hp: Optional[int] = None,
                            out_path=None) -> TransformResult:
    """
    Clone a job file with priorities injected into every set entry.

    Returns the transform result; the output file is written only once the
    whole document has been rewritten.
    """
    src_path = Path(src_path)
    try:
        with open(src_path, 'r', encoding='utf-8', newline='') as f:
            data = f.read()
    except OSError as e:
        raise PrioritizeError(f"Read failed: {src_path} ({e})") from e

    result = transform_all_sets(data, engine, max_hp)
    _write_atomic(Path(out_path) if out_path else prioritized_path(src_path), result.text)
    return result


# =============================================================================
# Export current gear
# =============================================================================

def build_export_lines(inventory: Inventory, engine: PriorityEngine,
                       player: PlayerState) -> List[str]:
    """Lines of a sets.exported={...} table for the equipped gear."""
    equipped = inventory.equipped()
    lines = ['sets.exported={']
    for slot in EXPORT_SLOT_ORDER:
        item = engine.snapshot_equipped(slot, equipped.get(slot))
        if item is None:
            continue
        priority = engine.compute_priority(item, player.max_hp)
        lines.append(build_item_line(slot, item.name, item.augments, priority if priority > 0 else None))
    lines.append('}')
    return lines


def write_export_p(inventory: Inventory, engine: PriorityEngine,
                   player: Optional[PlayerState], export_dir,
                   now: Optional[datetime] = None) -> Path:
    """Export the equipped gear to '<export_dir>/<player> <stamp>-p.lua'."""
    if player is None:
        raise PrioritizeError("No player data.")

    stamp = (now or datetime.now()).strftime('%Y-%m-%d %H-%M-%S')
    path = Path(export_dir) / f'{player.name or "PLAYER"} {stamp}-p.lua'
    _write_atomic(path, '\n'.join(build_export_lines(inventory, engine, player)))
    return path


# =============================================================================
# Wiring
# =============================================================================

def build_engine(settings: PrioritizerSettings,
                 inventory: Optional[Inventory] = None,
                 item_db: Optional[ItemDatabase] = None) -> PriorityEngine:
    """
    Engine for one run, with a fresh inventory augment index.

    Missing resource or inventory files leave the matching lookups empty.
    """
    if item_db is None:
        item_db = ItemDatabase()
        if settings.items_path.exists():
            item_db = load_database(str(settings.items_path),
                                    str(settings.descriptions_path),
                                    str(settings.item_mods_path))
        else:
            print(f"Warning: {settings.items_path} not found, base HP will be 0")

    decoder = load_decoder(str(settings.augments_path) if settings.augments_path.exists() else None)

    if inventory is None and settings.inventory_path:
        try:
            inventory = load_inventory(str(settings.inventory_path))
        except OSError as e:
            print(f"Warning: Failed to load inventory {settings.inventory_path}: {e}")

    index = InventoryAugmentIndex(inventory, item_db, decoder)
    return PriorityEngine(item_db, index, decoder)


def main(argv: Optional[List[str]] = None) -> int:
    # Accepted before or after the subcommand; unset options stay off the namespace
    common = argparse.ArgumentParser(add_help=False, argument_default=argparse.SUPPRESS)
    common.add_argument('--resources', type=str, help='Directory with Windower resource .lua files')
    common.add_argument('--inventory', type=str, help='Inventory CSV dump')
    common.add_argument('--max-hp', type=int, help='Player max HP (for Platinum Moogle Belt)')

    parser = argparse.ArgumentParser(description='Inject HP priorities into GearSwap sets', parents=[common])
    sub = parser.add_subparsers(dest='command', required=True)

    create = sub.add_parser('create', parents=[common], help='Clone a job file with priorities added')
    create.add_argument('lua_file', type=str)
    create.add_argument('-o', '--output', type=str, default=None)

    export = sub.add_parser('export-p', parents=[common], help='Export equipped gear as a prioritized set')
    export.add_argument('--player', type=str, default='PLAYER')
    export.add_argument('--export-dir', type=str, default=None)

    args = parser.parse_args(argv)
    max_hp = getattr(args, 'max_hp', None)
    settings = resolve_settings(
        resources_dir=getattr(args, 'resources', None),
        inventory_path=getattr(args, 'inventory', None),
        export_dir=getattr(args, 'export_dir', None),
    )
    engine = build_engine(settings)

    try:
        if args.command == 'create':
            src = Path(args.lua_file)
            out = Path(args.output) if args.output else prioritized_path(src)
            result = create_prioritized_file(src, engine, max_hp, out)
            print(f"GearSwap: Created {out.stem} ({result.changed} priorities injected).")
        else:
            inventory = engine.aug_index.inventory or Inventory()
            player = PlayerState(name=args.player, max_hp=max_hp)
            path = write_export_p(inventory, engine, player, settings.export_dir)
            print(f"GearSwap: Exported your prioritized equipped gear as {path.name}.")
    except (LuaParseError, PrioritizeError) as e:
        print(f"[prioritize] {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
