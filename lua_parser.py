"""
GearSwap Lua Parser

Locates equipment slot assignments (head="Nyame Helm", waist={ name=...})
inside GearSwap Lua files and rewrites their values in place.

No full Lua grammar: the only structure ever inspected is
<slot> = <string | table | bare token>. Everything else in the file is
treated as opaque text and copied through untouched.

Offsets are 0-based and spans are half-open, like Python slices.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from models import SLOT_KEYS, canonical_slot
from augment_parser import clean_augments, unescape_lua


class LuaParseError(ValueError):
    """A slot value could not be scanned as a single literal."""

    def __init__(self, message: str, offset: int = 0):
        super().__init__(f"{message} (at offset {offset})")
        self.offset = offset


# =============================================================================
# Patterns
# =============================================================================

QUOTES = ('"', "'")

# Bare tokens (nil, true, a variable) end at the next of these
BARE_TOKEN_END = (',', '}', '\n')

# Whole-word slot key followed by '=' (but not '==')
SLOT_ASSIGNMENT_PATTERN = re.compile(
    r'(?<!\w)(' + '|'.join(sorted(SLOT_KEYS, key=len, reverse=True)) + r')(?!\w)\s*=(?!=)\s*'
)

# head="Nyame Helm"  or  head='Nyame Helm'
BARE_STRING_PATTERN = re.compile(r"""^\s*(['"])(.*)\1\s*$""", re.DOTALL)

# name="..." inside a table
NAME_FIELD_PATTERN = re.compile(r"""[,{}\s]name\s*=\s*(['"])((?:\\.|(?!\1).)*)\1""", re.DOTALL)

AUGMENTS_FIELD_PATTERN = re.compile(r'augments\s*=\s*(?=\{)')

PRIORITY_VALUE_PATTERN = re.compile(r'(?<!\w)priority\s*=\s*(\d+)')

# priority=N, as the last field or mid-list / as the first field
PRIORITY_TRAILING_PATTERN = re.compile(r'\s*,\s*priority\s*=\s*\d+(?!\w)\s*')
PRIORITY_LEADING_PATTERN = re.compile(r'(?<!\w)priority\s*=\s*\d+\s*,\s*')
DANGLING_COMMA_PATTERN = re.compile(r'\s*,\s*\}(\s*)$')

NAME_SPACING_PATTERN = re.compile(r'\{[ \t]*name[ \t]*=')
PRIORITY_SPACING_PATTERN = re.compile(r',[ \t]*priority[ \t]*=')

ONLY_NAME_PATTERN = re.compile(r"""^name=(?:'[^']*'|"[^"]*"),?$""")


# =============================================================================
# Value Scanner
# =============================================================================

def _scan_string(src: str, i: int) -> Tuple[int, bool]:
    """Scan a quoted string starting at its opening quote."""
    n = len(src)
    quote = src[i]
    i += 1
    while i < n:
        c = src[i]
        if c == '\\':
            i += 2
        elif c == quote:
            return i + 1, True
        else:
            i += 1
    return n, False


def _comment_end(src: str, i: int) -> int:
    """Offset of the newline ending a -- comment (end of text if none)."""
    nl = src.find('\n', i)
    return len(src) if nl < 0 else nl


def _code_end(text: str) -> int:
    """Offset just past the last character of text outside whitespace and comments."""
    n = len(text)
    end = 0
    i = 0
    while i < n:
        c = text[i]
        if c in QUOTES:
            i, _ = _scan_string(text, i)
            end = i
            continue
        if text.startswith('--', i):
            i = _comment_end(text, i)
            continue
        if not c.isspace():
            end = i + 1
        i += 1
    return end


def scan_lua_value(src: str, start: int) -> Tuple[int, bool]:
    """
    Scan the single Lua value beginning at start (leading whitespace allowed).

    Returns:
        (end, closed): end is the offset just past the value; closed is False
        when a string or table runs off the end of the text. Empty input, an
        out-of-range start or only whitespace give (start, False).
    """
    n = len(src)
    if start < 0 or start >= n:
        return start, False

    i = start
    while i < n and src[i].isspace():
        i += 1
    if i >= n:
        return start, False

    ch = src[i]
    if ch in QUOTES:
        return _scan_string(src, i)

    if ch == '{':
        depth = 0
        while i < n:
            c = src[i]
            if c in QUOTES:
                i, closed = _scan_string(src, i)
                if not closed:
                    return i, False
                continue
            if src.startswith('--', i):
                i = _comment_end(src, i)
                continue
            if c == '{':
                depth += 1
            elif c == '}':
                depth -= 1
                if depth == 0:
                    return i + 1, True
            i += 1
        return n, False

    while i < n and src[i] not in BARE_TOKEN_END:
        i += 1
    return i, True


def read_lua_value(src: str, start: int) -> int:
    """Offset just past the Lua value beginning at start (start if none)."""
    return scan_lua_value(src, start)[0]


# =============================================================================
# Assignment Locator
# =============================================================================

@dataclass
class SlotAssignment:
    """One <slot> = <value> occurrence in a Lua file."""
    key: str            # Slot key as written (may be an alias)
    key_start: int      # Offset of the slot key
    value_start: int    # Offset just after '=' and following whitespace
    value_end: int      # Offset just past the value
    closed: bool = True

    @property
    def slot(self) -> str:
        """Canonical slot name used for scoring."""
        return canonical_slot(self.key)


def find_slot_assignment(src: str, pos: int = 0) -> Optional[SlotAssignment]:
    """Next slot assignment at or after pos, or None."""
    match = SLOT_ASSIGNMENT_PATTERN.search(src, pos)
    if not match:
        return None

    value_end, closed = scan_lua_value(src, match.end())
    return SlotAssignment(
        key=match.group(1),
        key_start=match.start(),
        value_start=match.end(),
        value_end=value_end,
        closed=closed,
    )


# =============================================================================
# RHS Rewriter
# =============================================================================

def lua_quote(text: str) -> str:
    """Double-quoted Lua string literal (like string.format('%q'))."""
    escaped = (text.replace('\\', '\\\\')
                   .replace('"', '\\"')
                   .replace('\n', '\\n')
                   .replace('\r', '\\r')
                   .replace('\0', '\\0'))
    return f'"{escaped}"'


def lua_single_quote(text: str) -> str:
    """Single-quoted Lua string literal, as GearSwap writes augments."""
    return "'" + str(text).replace('\\', '\\\\').replace("'", "\\'") + "'"


def is_bare_string(rhs: str) -> bool:
    return rhs.lstrip()[:1] in QUOTES


def extract_name_and_aug(rhs: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Item name and augments={...} text of a slot value.

    Returns:
        (name, aug_text); name is None when the value names no item and
        aug_text is None when there is no augments table.
    """
    match = BARE_STRING_PATTERN.match(rhs)
    if match:
        return unescape_lua(match.group(2)), None

    name = None
    match = NAME_FIELD_PATTERN.search(rhs)
    if match:
        name = unescape_lua(match.group(2))

    aug_text = None
    match = AUGMENTS_FIELD_PATTERN.search(rhs)
    if match:
        aug_end = read_lua_value(rhs, match.end())
        aug_text = rhs[match.start():aug_end]

    return name, aug_text


def strip_priority_field(rhs: str) -> str:
    """Remove an existing priority field from a table value, keeping other keys."""
    if '{' not in rhs:
        return rhs

    stripped, trailing = PRIORITY_TRAILING_PATTERN.subn('', rhs, count=1)
    stripped, leading = PRIORITY_LEADING_PATTERN.subn('', stripped, count=1)
    if trailing or leading:
        stripped = DANGLING_COMMA_PATTERN.sub(r'}\1', stripped, count=1)
    return stripped


def table_is_only_name(rhs: str) -> bool:
    """True if the value is exactly { name="X" } (any spacing)."""
    match = re.match(r'^\s*\{(.*)\}\s*$', rhs, re.DOTALL)
    if not match:
        return False
    body = re.sub(r'\s+', '', match.group(1))
    return bool(ONLY_NAME_PATTERN.match(body))


def _normalize_spacing(rhs: str) -> str:
    rhs = NAME_SPACING_PATTERN.sub('{ name=', rhs)
    return PRIORITY_SPACING_PATTERN.sub(', priority=', rhs)


def inject_priority_rhs(rhs: str, priority: int) -> str:
    """
    Rewrite a slot value so it carries the given priority.

    A zero priority removes the field, and a table left holding only the
    name collapses back to a plain string.
    """
    if not priority or priority <= 0:
        if is_bare_string(rhs):
            return rhs

        name, aug_text = extract_name_and_aug(rhs)
        stripped = strip_priority_field(rhs)
        if aug_text is not None:
            return stripped
        if name is not None and table_is_only_name(stripped):
            return lua_quote(name)
        return _normalize_spacing(stripped)

    if is_bare_string(rhs):
        name, _ = extract_name_and_aug(rhs)
        if name is None:
            return rhs
        return f'{{ name={lua_quote(name)}, priority={priority}}}'

    if PRIORITY_VALUE_PATTERN.search(rhs):
        rhs = PRIORITY_VALUE_PATTERN.sub(f'priority={priority}', rhs, count=1)
    else:
        body = rhs.rstrip()
        if body.endswith('}'):
            # The field goes after the last top-level code, ahead of any
            # trailing comment; a closing brace on its own line stays there.
            inner = body[:-1]
            end = _code_end(inner)
            head, tail = inner[:end], inner[end:]
            if head.endswith(','):
                head = head[:-1]
            if '\n' not in tail:
                tail = ''
            rhs = f'{head}, priority={priority}{tail}}}'

    return _normalize_spacing(rhs)


def priority_in(rhs: str) -> Optional[int]:
    """Priority value written in a slot value, if any."""
    match = PRIORITY_VALUE_PATTERN.search(rhs)
    return int(match.group(1)) if match else None


# =============================================================================
# Export Lines
# =============================================================================

def build_item_line(slot: str, name: str, augments: Optional[List[str]] = None,
                    priority: Optional[int] = None) -> str:
    """
    One line of an exported set.

    Examples:
        head="Nyame Helm",
        waist={ name="Plat. Mog. Belt", priority=253},
        back={ name="Rudianos's Mantle", augments={'HP+60','Eva.+20'}, priority=60},
    """
    augs = clean_augments(augments or [])
    if not augs and not priority:
        return f'    {slot}={lua_quote(name)},'

    parts = [f'    {slot}={{ name={lua_quote(name)}']
    if augs:
        parts.append(', augments={' + ','.join(lua_single_quote(a) for a in augs) + '}')
    if priority and priority > 0:
        parts.append(f', priority={priority}')
    parts.append('},')
    return ''.join(parts)
