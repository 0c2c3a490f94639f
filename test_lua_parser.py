"""Tests for the slot value scanner, locator and rewriter."""

from lua_parser import (
    read_lua_value,
    scan_lua_value,
    find_slot_assignment,
    extract_name_and_aug,
    strip_priority_field,
    table_is_only_name,
    inject_priority_rhs,
    priority_in,
    lua_quote,
    build_item_line,
)


# =============================================================================
# Value Scanner
# =============================================================================

def test_scan_quoted_string_with_escapes():
    src = 'head="Foo\\"Bar", body="x"'
    end = read_lua_value(src, 5)
    assert src[5:end] == '"Foo\\"Bar"'


def test_scan_single_quoted_string():
    src = "neck='Warrior\\'s Bead Necklace +2',"
    end = read_lua_value(src, 5)
    assert src[5:end] == "'Warrior\\'s Bead Necklace +2'"


def test_scan_table_ignores_braces_in_strings():
    src = "back={ name=\"Cape\", augments={'}{ odd','HP+60',} },\nnext"
    end = read_lua_value(src, 5)
    assert src[5:end] == "{ name=\"Cape\", augments={'}{ odd','HP+60',} }"


def test_scan_table_skips_comments():
    src = "back={ name=\"Cape\", -- don't } touch\n    augments={'HP+60'} },\nnext"
    end = read_lua_value(src, 5)
    assert src[5:end] == "{ name=\"Cape\", -- don't } touch\n    augments={'HP+60'} }"
    assert scan_lua_value("{ name='x' -- }", 0) == (15, False)


def test_scan_bare_token_stops_at_delimiters():
    src = "main=empty, sub=nil}\n"
    assert src[5:read_lua_value(src, 5)] == "empty"
    assert src[16:read_lua_value(src, 16)] == "nil"
    src = "ammo=gear.Ammo\nhead"
    assert src[5:read_lua_value(src, 5)] == "gear.Ammo"


def test_scan_skips_leading_whitespace():
    src = 'head =   "Nyame Helm",'
    end = read_lua_value(src, 6)
    assert src[6:end].strip() == '"Nyame Helm"'


def test_scan_empty_and_out_of_range():
    assert read_lua_value("", 0) == 0
    assert read_lua_value("abc", 10) == 10
    assert read_lua_value("abc", -1) == -1
    assert read_lua_value("x=   ", 2) == 2


def test_scan_reports_unterminated_values():
    assert scan_lua_value('"open', 0) == (5, False)
    assert scan_lua_value("{ name='x'", 0) == (10, False)
    assert scan_lua_value("{ name='x }", 0) == (11, False)
    assert scan_lua_value('"done"', 0) == (6, True)


# =============================================================================
# Assignment Locator
# =============================================================================

def test_find_slot_assignment_whole_words_only():
    src = 'sub_job = "NIN"\nunknown_slot="Foo",\nmyhead="x",\nhead="Nyame Helm",'
    a = find_slot_assignment(src)
    assert a.key == 'head'
    assert src[a.value_start:a.value_end] == '"Nyame Helm"'


def test_find_slot_assignment_skips_comparisons():
    src = 'if waist == "x" then end\nwaist="Plat. Mog. Belt"'
    a = find_slot_assignment(src)
    assert a.key_start == src.index('waist="')


def test_find_slot_assignment_aliases_keep_spelling():
    src = 'ear1="Odnowa Earring +1", rring="Moonlight Ring"'
    a = find_slot_assignment(src)
    assert a.key == 'ear1'
    assert a.slot == 'left_ear'
    b = find_slot_assignment(src, a.value_end)
    assert b.key == 'rring'
    assert b.slot == 'right_ring'
    assert find_slot_assignment(src, b.value_end) is None


def test_find_slot_assignment_value_spans_whitespace():
    src = 'neck =\n    "Sibyl Scarf",'
    a = find_slot_assignment(src)
    assert src[a.value_start:a.value_end] == '"Sibyl Scarf"'


# =============================================================================
# Extraction
# =============================================================================

def test_extract_bare_string():
    assert extract_name_and_aug('"Nyame Helm"') == ("Nyame Helm", None)
    assert extract_name_and_aug("'Warrior\\'s Bead Necklace +2'") == ("Warrior's Bead Necklace +2", None)


def test_extract_table_fields():
    rhs = "{ name=\"Odyssean Helm\", augments={'HP+50','Accuracy+10',}, priority=80 }"
    name, aug = extract_name_and_aug(rhs)
    assert name == "Odyssean Helm"
    assert aug == "augments={'HP+50','Accuracy+10',}"


def test_extract_table_without_name():
    assert extract_name_and_aug("{ priority=5 }") == (None, None)
    assert extract_name_and_aug("empty") == (None, None)


# =============================================================================
# RHS Rewriter
# =============================================================================

def test_strip_priority_trailing_and_leading():
    assert strip_priority_field('{ name="X", priority=40 }') == '{ name="X"}'
    assert strip_priority_field('{priority=40, name="X"}') == '{name="X"}'
    assert strip_priority_field('{ name="X", priority=40, }') == '{ name="X"}'
    assert strip_priority_field('{ name="X", priority=4, augments={\'A\',} }') == '{ name="X", augments={\'A\',} }'
    assert strip_priority_field('"X"') == '"X"'


def test_strip_leaves_unrelated_dangling_commas():
    rhs = "{ name=\"Nyame Helm\", augments={'Path: B',} }"
    assert strip_priority_field(rhs) == rhs


def test_table_is_only_name():
    assert table_is_only_name('{ name="X"}')
    assert table_is_only_name("{name = 'X' ,}")
    assert not table_is_only_name('{ name="X", augments={} }')
    assert not table_is_only_name('"X"')


def test_bare_string_zero_priority_unchanged():
    assert inject_priority_rhs('"Sibyl Scarf"', 0) == '"Sibyl Scarf"'
    assert inject_priority_rhs("'Sibyl Scarf'", 0) == "'Sibyl Scarf'"


def test_bare_string_expands_to_table():
    assert inject_priority_rhs('"Bloodbead Gorget"', 60) == '{ name="Bloodbead Gorget", priority=60}'
    assert inject_priority_rhs("'Warrior\\'s Bead Necklace +2'", 100) == \
        '{ name="Warrior\'s Bead Necklace +2", priority=100}'


def test_table_priority_updated_in_place():
    rhs = '{ name="Plat. Mog. Belt", priority=40 }'
    assert inject_priority_rhs(rhs, 253) == '{ name="Plat. Mog. Belt", priority=253 }'


def test_table_priority_appended():
    rhs = "{ name=\"Odyssean Helm\", augments={'HP+50'} }"
    assert inject_priority_rhs(rhs, 80) == "{ name=\"Odyssean Helm\", augments={'HP+50'}, priority=80}"
    rhs = "{name=\"Odyssean Helm\", augments={'HP+50'},}"
    assert inject_priority_rhs(rhs, 80) == "{ name=\"Odyssean Helm\", augments={'HP+50'}, priority=80}"


def test_table_priority_appended_before_trailing_comment():
    rhs = "{ name=\"Rudianos's Mantle\", augments={'HP+60'} -- tank cape\n}"
    assert inject_priority_rhs(rhs, 60) == \
        "{ name=\"Rudianos's Mantle\", augments={'HP+60'}, priority=60 -- tank cape\n}"
    rhs = "{ name=\"Rudianos's Mantle\",\n    augments={'HP+60'}, -- it's mine\n    }"
    assert inject_priority_rhs(rhs, 60) == \
        "{ name=\"Rudianos's Mantle\",\n    augments={'HP+60'}, priority=60 -- it's mine\n    }"


def test_table_priority_appended_keeps_closing_line():
    rhs = "{\n    name=\"Odyssean Helm\",\n    augments={'HP+50'},\n}"
    assert inject_priority_rhs(rhs, 80) == \
        "{\n    name=\"Odyssean Helm\",\n    augments={'HP+50'}, priority=80\n}"


def test_priority_field_needs_whole_word():
    rhs = '{ name="X", max_priority=3 }'
    assert priority_in(rhs) is None
    assert inject_priority_rhs(rhs, 50) == '{ name="X", max_priority=3, priority=50}'
    assert inject_priority_rhs(rhs, 0) == rhs
    assert strip_priority_field('{max_priority=3, name="X"}') == '{max_priority=3, name="X"}'


def test_table_spacing_normalized():
    rhs = '{name="X",priority=5}'
    assert inject_priority_rhs(rhs, 7) == '{ name="X", priority=7}'


def test_zero_priority_collapses_name_only_table():
    assert inject_priority_rhs('{ name="Sibyl Scarf", priority=12 }', 0) == '"Sibyl Scarf"'
    assert inject_priority_rhs("{ name='Sibyl Scarf' }", 0) == '"Sibyl Scarf"'


def test_zero_priority_keeps_augments():
    rhs = "{ name=\"Nyame Helm\", augments={'Path: B',}, priority=30 }"
    assert inject_priority_rhs(rhs, 0) == "{ name=\"Nyame Helm\", augments={'Path: B',}}"
    rhs = "{ name=\"Nyame Helm\", augments={'Path: B',} }"
    assert inject_priority_rhs(rhs, 0) == rhs


def test_zero_priority_other_fields_kept():
    rhs = '{name="X", bag="wardrobe 2", priority=9}'
    assert inject_priority_rhs(rhs, 0) == '{ name="X", bag="wardrobe 2"}'


def test_bare_token_untouched():
    assert inject_priority_rhs('empty', 0) == 'empty'


def test_priority_in():
    assert priority_in('{ name="X", priority=12 }') == 12
    assert priority_in('"X"') is None


def test_lua_quote_escapes():
    assert lua_quote('Say "hi"\\') == '"Say \\"hi\\"\\\\"'


# =============================================================================
# Export lines
# =============================================================================

def test_build_item_line_forms():
    assert build_item_line('neck', 'Sibyl Scarf', [], None) == '    neck="Sibyl Scarf",'
    assert build_item_line('waist', 'Plat. Mog. Belt', None, 253) == \
        '    waist={ name="Plat. Mog. Belt", priority=253},'
    assert build_item_line('back', "Rudianos's Mantle", ['HP+60', 'none', 'Eva.+20'], 60) == \
        "    back={ name=\"Rudianos's Mantle\", augments={'HP+60','Eva.+20'}, priority=60},"
    assert build_item_line('head', 'Nyame Helm', ['Path: B'], None) == \
        "    head={ name=\"Nyame Helm\", augments={'Path: B'}},"
