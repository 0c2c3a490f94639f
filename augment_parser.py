"""
Augment Parser

Extracts HP contributions from free-form item text:
1. "HP+<N>" stat lines (augments, descriptions)
2. "Converts <N> MP to HP" / "<N> MP to HP" conversions

Parsing Strategy:
- A single text blob (an item description) describes one stat, so the best
  HP+ figure and the best MP to HP figure are taken (max, not sum).
- An augment list holds independent stat lines, so every HP+ value in every
  augment is summed, plus each augment's best MP to HP figure.
"""

import re
from typing import List, Optional, Any


# =============================================================================
# HP PATTERNS
# =============================================================================
# Examples:
#   HP+50
#   HP +25
#   "Converts 30 MP to HP"
#   25 MP to HP
#
HP_PLUS_PATTERN = re.compile(r'HP\s*\+\s*(\d+)', re.IGNORECASE)

MP_TO_HP_PATTERNS = [
    re.compile(r'converts\s*(\d+)\s*mp\s*to\s*hp', re.IGNORECASE),
    re.compile(r'(\d+)\s*mp\s*to\s*hp', re.IGNORECASE),
]

# Lua string literal inside an augments={...} table
LUA_STRING_PATTERN = re.compile(r"""(['"])((?:\\.|(?!\1).)*)\1""", re.DOTALL)

LUA_ESCAPES = {'n': '\n', 't': '\t', 'r': '\r'}


# =============================================================================
# NAME NORMALIZATION
# =============================================================================
# Applied in order after stripping punctuation, so textual variants of the
# same item ("Warrior's Beads", "war. bead necklace +1") collide.
NAME_SYNONYMS = [
    ('necklace', ''),
    ('beads', 'bead'),
    ('warriors', 'war'),
    ('knights', 'kgt'),
]


def simple_key(name: Optional[str]) -> str:
    """Lower-cased name, used for belt detection and Unity lookups."""
    return (name or '').lower()


def norm_item_key(name: Optional[str]) -> str:
    """
    Normalize an item name for override and inventory lookups.

    Drops every character except letters, digits and '+', then collapses
    the known synonyms.
    """
    key = re.sub(r'[^a-z0-9+]', '', simple_key(name))
    for old, new in NAME_SYNONYMS:
        key = key.replace(old, new)
    return key


# =============================================================================
# HP EXTRACTION
# =============================================================================

def hp_plus_values(text: Optional[str]) -> List[int]:
    """All HP+N figures found in text, in order."""
    return [int(n) for n in HP_PLUS_PATTERN.findall(text or '')]


def mp_to_hp_from_text(text: Optional[str]) -> int:
    """Best "MP to HP" conversion mentioned in text (0 if none)."""
    best = 0
    for pattern in MP_TO_HP_PATTERNS:
        for num in pattern.findall(text or ''):
            best = max(best, int(num))
    return best


def hp_from_description(text: Optional[str]) -> int:
    """
    HP mined from a single description blob.

    Takes the best HP+ figure, not the sum: several mentions in one blob
    usually restate or qualify the same bonus.
    """
    best_hp_plus = max(hp_plus_values(text), default=0)
    return max(best_hp_plus, 0) + mp_to_hp_from_text(text)


def clean_augments(augments: Any) -> List[str]:
    """Trim augment strings and drop empty and 'none' entries."""
    if not isinstance(augments, (list, tuple)):
        return []

    cleaned = []
    for aug in augments:
        if not isinstance(aug, str):
            continue
        aug = aug.strip()
        if aug and aug.lower() != 'none':
            cleaned.append(aug)
    return cleaned


def hp_from_aug_strings(augments: Any) -> int:
    """Sum of HP+ and MP to HP contributions across an augment list."""
    if not isinstance(augments, (list, tuple)):
        return 0

    total = 0
    for aug in augments:
        if not isinstance(aug, str):
            continue
        total += sum(hp_plus_values(aug))
        total += mp_to_hp_from_text(aug)
    return total


def unescape_lua(text: str) -> str:
    """Resolve backslash escapes of a Lua string body."""
    return re.sub(r'\\(.)', lambda m: LUA_ESCAPES.get(m.group(1), m.group(1)), text, flags=re.DOTALL)


def parse_augment_table(aug_text: Optional[str]) -> List[str]:
    """
    Extract augment strings from inline Lua table text.

    Args:
        aug_text: e.g. augments={'HP+50','"Fast Cast"+5',}

    Returns:
        Cleaned list of augment strings
    """
    if not aug_text:
        return []
    brace = aug_text.find('{')
    body = aug_text[brace + 1:] if brace >= 0 else aug_text
    return clean_augments([unescape_lua(m.group(2)) for m in LUA_STRING_PATTERN.finditer(body)])
