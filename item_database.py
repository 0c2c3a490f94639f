"""
Item Database Loader

Parses Windower's resource files (items.lua, item_descriptions.lua and
item_mods.lua) and exposes the lookups the prioritizer needs: names,
descriptions and HP mods.
"""

import re
import os
from typing import Dict, Optional, List, Any

from models import ItemBase, Container, CONTAINER_NAMES


class LuaTableParser:
    """
    Parser for Lua table syntax used in Windower resource files.

    Handles the format:
    return {
        [id] = {key=value, key=value, ...},
        [id] = {{mod="HP", value=30}, {mod="MP", value=20}},
        ...
    }
    """

    def __init__(self, content: str):
        self.content = content
        self.pos = 0

    def parse(self) -> Dict[int, Any]:
        """Parse the Lua file and return a dict of id -> entry data."""
        self._skip_to_table_start()
        return self._parse_table()

    def _peek(self) -> str:
        return self.content[self.pos] if self.pos < len(self.content) else ''

    def _skip_to_table_start(self):
        """Skip past 'return {' to the table contents."""
        match = re.search(r'return\s*\{', self.content)
        if match:
            self.pos = match.end()
        else:
            raise ValueError("Could not find 'return {' in Lua file")

    def _skip_whitespace(self):
        """Skip whitespace and comments."""
        while self.pos < len(self.content):
            c = self.content[self.pos]
            if c in ' \t\n\r':
                self.pos += 1
            elif self.content.startswith('--', self.pos):
                while self.pos < len(self.content) and self.content[self.pos] != '\n':
                    self.pos += 1
            else:
                break

    def _parse_table(self) -> Dict[int, Any]:
        """Parse the outer table with numeric keys."""
        result = {}

        while self.pos < len(self.content):
            self._skip_whitespace()
            c = self._peek()

            if c == '' or c == '}':
                self.pos += 1
                break

            if c == ',':
                self.pos += 1
                continue

            if c == '[':
                self.pos += 1
                self._skip_whitespace()
                key = self._parse_number()
                self._skip_whitespace()
                if self._peek() == ']':
                    self.pos += 1
                self._skip_whitespace()
                if self._peek() == '=':
                    self.pos += 1

                value = self._parse_value()
                if isinstance(key, int) and value is not None:
                    result[key] = value
            else:
                self._skip_to_next_entry()

        return result

    def _parse_value(self) -> Any:
        """Parse a Lua value (string, number, table, etc.)."""
        self._skip_whitespace()

        if self.pos >= len(self.content):
            return None

        c = self.content[self.pos]

        if c == '{':
            return self._parse_inner_table()
        elif c == '"' or c == "'":
            return self._parse_string()
        elif c == '-' or c.isdigit():
            return self._parse_number()
        elif self.content.startswith('true', self.pos):
            self.pos += 4
            return True
        elif self.content.startswith('false', self.pos):
            self.pos += 5
            return False
        elif self.content.startswith('nil', self.pos):
            self.pos += 3
            return None
        else:
            return self._parse_identifier()

    def _parse_inner_table(self) -> Dict[Any, Any]:
        """
        Parse a Lua table with string keys or positional entries.

        Positional entries get 1-based integer keys, as Lua numbers them.
        """
        result = {}
        next_index = 1
        self.pos += 1  # Skip '{'

        while self.pos < len(self.content):
            self._skip_whitespace()
            c = self._peek()

            if c == '}':
                self.pos += 1
                break

            if c == ',' or c == ';':
                self.pos += 1
                continue

            start = self.pos
            key = None
            if c == '[':
                self.pos += 1
                self._skip_whitespace()
                if self._peek() in ('"', "'"):
                    key = self._parse_string()
                else:
                    key = self._parse_number()
                self._skip_whitespace()
                if self._peek() == ']':
                    self.pos += 1
            elif c.isalpha() or c == '_':
                key = self._parse_identifier()

            self._skip_whitespace()

            if key is not None and self._peek() == '=':
                self.pos += 1
                result[key] = self._parse_value()
            else:
                # Positional value
                self.pos = start
                value = self._parse_value()
                if self.pos == start:
                    self._skip_to_next_entry()
                    continue
                result[next_index] = value
                next_index += 1

        return result

    def _parse_string(self) -> str:
        """Parse a quoted string."""
        quote = self.content[self.pos]
        self.pos += 1
        result = []

        while self.pos < len(self.content):
            c = self.content[self.pos]

            if c == quote:
                self.pos += 1
                break
            elif c == '\\':
                self.pos += 1
                if self.pos < len(self.content):
                    escaped = self.content[self.pos]
                    result.append({'n': '\n', 't': '\t', 'r': '\r'}.get(escaped, escaped))
                    self.pos += 1
            else:
                result.append(c)
                self.pos += 1

        return ''.join(result)

    def _parse_number(self):
        """Parse a number."""
        start = self.pos

        if self._peek() == '-':
            self.pos += 1

        while self.pos < len(self.content) and (self.content[self.pos].isdigit() or self.content[self.pos] == '.'):
            self.pos += 1

        num_str = self.content[start:self.pos]
        try:
            if '.' in num_str:
                return float(num_str)
            return int(num_str)
        except ValueError:
            return 0

    def _parse_identifier(self) -> str:
        """Parse an identifier."""
        start = self.pos

        while self.pos < len(self.content) and (self.content[self.pos].isalnum() or self.content[self.pos] == '_'):
            self.pos += 1

        return self.content[start:self.pos]

    def _skip_to_next_entry(self):
        """Skip to the next table entry."""
        depth = 0
        while self.pos < len(self.content):
            c = self.content[self.pos]
            if c == '{':
                depth += 1
            elif c == '}':
                if depth == 0:
                    break
                depth -= 1
            elif c == ',' and depth == 0:
                self.pos += 1
                break
            self.pos += 1


def _load_lua_file(path: str) -> Dict[int, Any]:
    with open(path, 'r', encoding='utf-8') as f:
        content = f.read()
    return LuaTableParser(content).parse()


def _mods_list(raw: Any) -> List[Dict]:
    """Normalize an item_mods entry to a list of mod dicts."""
    if isinstance(raw, dict):
        # {id=..., mods={...}} or a positional list parsed as {1: {...}, 2: {...}}
        if isinstance(raw.get('mods'), dict):
            raw = raw['mods']
        positional = [(k, m) for k, m in raw.items() if isinstance(k, int) and isinstance(m, dict)]
        return [m for _, m in sorted(positional, key=lambda kv: kv[0])]
    if isinstance(raw, list):
        return [m for m in raw if isinstance(m, dict)]
    return []


class ItemDatabase:
    """
    Database of FFXI items loaded from Windower resources.

    Every lookup returns an empty value rather than raising when the item
    is unknown.
    """

    def __init__(self):
        self.items: Dict[int, ItemBase] = {}
        self.items_by_name: Dict[str, ItemBase] = {}

    def load_from_lua(self, items_lua_path: str,
                      descriptions_lua_path: Optional[str] = None,
                      item_mods_lua_path: Optional[str] = None):
        """
        Load items from Windower's items.lua file.

        Args:
            items_lua_path: Path to items.lua
            descriptions_lua_path: Optional path to item_descriptions.lua
            item_mods_lua_path: Optional path to item_mods.lua
        """
        raw_items = _load_lua_file(items_lua_path)

        descriptions: Dict[int, str] = {}
        if descriptions_lua_path and os.path.exists(descriptions_lua_path):
            for item_id, desc_data in _load_lua_file(descriptions_lua_path).items():
                if isinstance(desc_data, dict):
                    descriptions[item_id] = desc_data.get('en', desc_data.get('enl', '')) or ''
                elif isinstance(desc_data, str):
                    descriptions[item_id] = desc_data

        mods: Dict[int, List[Dict]] = {}
        if item_mods_lua_path and os.path.exists(item_mods_lua_path):
            for item_id, mod_data in _load_lua_file(item_mods_lua_path).items():
                mods[item_id] = _mods_list(mod_data)

        for item_id, data in raw_items.items():
            if not isinstance(data, dict):
                continue
            self.add_item(ItemBase(
                id=item_id,
                name=data.get('en', data.get('english', f'Item {item_id}')),
                name_log=data.get('enl', data.get('english_log', '')) or '',
                description=descriptions.get(item_id, ''),
                hp_mods=mods.get(item_id, []),
                slots=data.get('slots', 0) or 0,
            ))

    def add_item(self, item: ItemBase):
        """Add or replace an item and index its names."""
        self.items[item.id] = item
        if item.name:
            self.items_by_name[item.name.lower()] = item
        if item.name_log:
            self.items_by_name[item.name_log.lower()] = item

    def get_item(self, item_id: int) -> Optional[ItemBase]:
        """Get item by ID."""
        return self.items.get(item_id)

    def get_item_by_name(self, name: str) -> Optional[ItemBase]:
        """Get item by name (case-insensitive, English or log name)."""
        return self.items_by_name.get((name or '').lower())

    def id_by_name(self, name: str) -> Optional[int]:
        item = self.get_item_by_name(name)
        return item.id if item else None

    def item_name(self, item_id: int) -> Optional[str]:
        item = self.items.get(item_id)
        if item is None:
            return None
        return item.name or item.name_log or None

    def description(self, item_id: int) -> str:
        item = self.items.get(item_id)
        return item.description if item else ''

    def base_hp_mods(self, item_id: int) -> int:
        """Sum of the structured HP mods of an item."""
        item = self.items.get(item_id)
        if item is None:
            return 0

        total = 0
        for mod in item.hp_mods:
            if mod.get('mod') in ('HP', 'hp') or mod.get('id') == 1:
                try:
                    total += int(mod.get('value'))
                except (TypeError, ValueError):
                    continue
        return total

    def bags(self) -> Dict[Container, str]:
        """Storage containers known to the resources."""
        return dict(CONTAINER_NAMES)


def load_database(items_path: str, descriptions_path: Optional[str] = None,
                  item_mods_path: Optional[str] = None) -> ItemDatabase:
    """Load a fresh item database from Lua files."""
    db = ItemDatabase()
    db.load_from_lua(items_path, descriptions_path, item_mods_path)
    return db
