"""Tests for the REST endpoints."""

import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

import api


@pytest.fixture
def client(monkeypatch, item_db, inventory, engine):
    state = api.AppState()
    state.item_db = item_db
    state.inventory = inventory
    state.inventory_filename = "inventory.csv"
    state.engine = engine
    monkeypatch.setattr(api, 'state', state)
    return TestClient(api.app)


def test_status(client):
    response = client.get("/api/status")
    assert response.status_code == 200
    data = response.json()
    assert data['status'] == 'ready'
    assert data['inventory_loaded'] is True
    assert data['inventory_filename'] == 'inventory.csv'
    assert data['item_count'] == 5
    assert data['resources_loaded'] is True


def test_prioritize(client):
    lua = 'sets.idle = {\n    head="Odyssean Helm",\n    waist={ name="Plat. Mog. Belt", priority=40 },\n}\n'
    response = client.post(
        "/api/prioritize",
        files={'file': ('PLD.lua', lua.encode('utf-8'), 'text/plain')},
        data={'max_hp': '2786'},
    )
    assert response.status_code == 200
    data = response.json()
    assert data['success'] is True
    assert data['output_filename'] == 'PLD-p.lua'
    assert data['changed'] == 2
    assert data['assignments'] == 2
    assert data['lua_content'] == (
        'sets.idle = {\n'
        '    head={ name="Odyssean Helm", priority=80},\n'
        '    waist={ name="Plat. Mog. Belt", priority=253 },\n'
        '}\n'
    )


def test_prioritize_parse_error(client):
    response = client.post(
        "/api/prioritize",
        files={'file': ('BAD.lua', b'head="Odyssean Helm', 'text/plain')},
    )
    assert response.status_code == 200
    data = response.json()
    assert data['success'] is False
    assert 'Unterminated value' in data['error']
    assert data['lua_content'] is None


def test_export(client):
    response = client.post("/api/export", data={'player': 'Tanky', 'max_hp': '2786'})
    assert response.status_code == 200
    data = response.json()
    assert data['player'] == 'Tanky'
    assert data['lua_content'].splitlines()[0] == 'sets.exported={'
    assert '    waist={ name="Plat. Mog. Belt", priority=253},' in data['lua_content']


def test_export_without_inventory(client):
    api.state.inventory = None
    response = client.post("/api/export", data={'player': 'Tanky'})
    assert response.status_code == 400


def test_upload_inventory_resets_engine(client):
    csv_text = 'item_id,container_id,slot,augments,extdata,equip_slot\n23520,8,1,HP+70,,head\n'
    response = client.post(
        "/api/upload/inventory",
        files={'file': ('mule.csv', csv_text.encode('utf-8'), 'text/csv')},
    )
    data = response.json()
    assert data['success'] is True
    assert data['item_count'] == 1
    assert api.state.inventory_filename == 'mule.csv'
    assert api.state.engine is None

    response = client.post(
        "/api/prioritize",
        files={'file': ('WAR.lua', b'head="Odyssean Helm",', 'text/plain')},
    )
    assert response.json()['lua_content'] == 'head={ name="Odyssean Helm", priority=100},'


def test_upload_inventory_ignores_client_path(client, monkeypatch, tmp_path):
    seen = []
    real_load = api.load_inventory

    def recording_load(path):
        seen.append(Path(path))
        return real_load(path)

    monkeypatch.setattr(api, 'load_inventory', recording_load)
    monkeypatch.setattr(tempfile, 'tempdir', str(tmp_path))

    csv_text = 'item_id,container_id,slot,augments,extdata,equip_slot\n23520,8,1,HP+70,,head\n'
    response = client.post(
        "/api/upload/inventory",
        files={'file': ('../../outside.csv', csv_text.encode('utf-8'), 'text/csv')},
    )

    assert response.json()['success'] is True
    assert len(seen) == 1
    assert seen[0].parent == tmp_path
    assert not seen[0].exists()
    assert list(tmp_path.iterdir()) == []
