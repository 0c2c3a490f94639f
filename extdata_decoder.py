"""
Extdata Decoder for FFXI Equipment Augments

Decodes the binary extdata from inventory items to extract augment text.

Only standard augmented equipment (type 0x01/0x02, 11-bit ID + 5-bit value)
is decoded. Other extdata types carry no augment text that affects HP.
"""

import re
from typing import Dict, List, Tuple, Optional, Any

from models import InventoryEntry
from augment_parser import clean_augments


class AugmentDatabase:
    """Database of augment ID -> text mappings from augments.lua"""

    def __init__(self):
        self.augments: Dict[int, str] = {}

    def load_from_lua(self, lua_path: str):
        """Load augments from Windower's augments.lua file."""
        with open(lua_path, 'r', encoding='utf-8') as f:
            content = f.read()

        # Parse entries like: [123] = {id=123,en="HP%+d ",ja="..."},
        pattern = r'\[(\d+)\]\s*=\s*\{[^}]*en="([^"]*)"'

        for match in re.finditer(pattern, content):
            self.augments[int(match.group(1))] = match.group(2)

    def get_augment_text(self, aug_id: int, value: int) -> str:
        """Get augment text with value substituted."""
        template = self.augments.get(aug_id)

        # Skip placeholder entries that just show the next number
        if not template or template.isdigit():
            return f"Aug#{aug_id}: {value}"

        result = template
        while '%+d' in result:
            result = result.replace('%+d', f'{value:+d}', 1)
        while '%d' in result:
            result = result.replace('%d', str(value), 1)
        result = result.replace('%%', '%')
        result = result.replace('\\"', '"')
        return result.strip()


# =============================================================================
# EXTDATA DECODER
# =============================================================================

class ExtdataDecoder:
    """
    Decodes FFXI equipment extdata to extract augments.

    Extdata types 0x01 and 0x02 (standard augmented equipment) use the 11+5
    bit format; every other type decodes to no augments.
    """

    def __init__(self, augment_db: Optional[AugmentDatabase] = None):
        self.augment_db = augment_db

    def decode(self, entry: InventoryEntry) -> List[str]:
        """
        Augment strings carried by an inventory entry.

        Text augments from the dump win over decoded extdata: both describe
        the same augments, and using both would count each stat twice.
        Returns an empty list when nothing can be decoded.
        """
        text_augments = parse_augments_text(entry.augments_text)
        if text_augments:
            return text_augments

        result = self.decode_hex(entry.extdata, entry.item_id)
        return clean_augments([text for _, _, text in result.get('augments', [])])

    def decode_hex(self, hex_str: str, item_id: int = 0) -> Dict[str, Any]:
        """
        Decode a hex string extdata.

        Args:
            hex_str: The hex-encoded extdata string
            item_id: The item ID (used for context)

        Returns:
            Dictionary with decoded information
        """
        if not hex_str or hex_str == '0' * len(hex_str):
            return {'type': 0, 'augments': []}

        try:
            data = bytes.fromhex(hex_str)
        except ValueError:
            return {'type': 0, 'augments': [], 'error': 'Invalid hex string'}

        return self.decode_bytes(data, item_id)

    def decode_bytes(self, data: bytes, item_id: int = 0) -> Dict[str, Any]:
        """Decode extdata bytes."""
        if len(data) < 4:
            return {'type': 0, 'augments': []}

        result = {
            'type': data[0],
            'subtype': data[1],
            'item_id': item_id,
            'augments': [],
        }

        if data[0] in (0x01, 0x02):
            result['augments'] = self._decode_standard_augments(data)

        return result

    def _decode_standard_augments(self, data: bytes) -> List[Tuple[int, int, str]]:
        """
        Decode augments from standard equipment extdata (type 0x01/0x02).

        Format: 11-bit ID + 5-bit value = 16 bits per augment
        """
        augments = []
        pos = 2  # Skip type bytes

        while pos + 1 < len(data):
            word = data[pos] | (data[pos + 1] << 8)
            pos += 2

            if word == 0:
                continue

            aug_id = word & 0x7FF  # Lower 11 bits
            value = (word >> 11) & 0x1F  # Upper 5 bits

            if 0 < aug_id < 2000:
                text = ""
                if self.augment_db:
                    text = self.augment_db.get_augment_text(aug_id, value)
                augments.append((aug_id, value, text))

        return augments


def parse_augments_text(augments_str: str) -> List[str]:
    """Split a semicolon separated augments field (\\; escapes a semicolon)."""
    if not augments_str:
        return []

    augments_str = augments_str.replace('\\;', '\x00')
    return clean_augments([part.replace('\x00', ';') for part in augments_str.split(';')])


def load_decoder(augments_lua_path: Optional[str] = None) -> ExtdataDecoder:
    """Decoder backed by augments.lua when the file is available."""
    aug_db = None
    if augments_lua_path:
        aug_db = AugmentDatabase()
        try:
            aug_db.load_from_lua(augments_lua_path)
        except OSError as e:
            print(f"Warning: Failed to load augment table {augments_lua_path}: {e}")
            aug_db = None
    return ExtdataDecoder(aug_db)
