#!/usr/bin/env python3
"""
GearSwap Prioritizer - FastAPI Backend

REST endpoints for prioritizing uploaded GearSwap job files and exporting
the equipped gear as a prioritized set.
"""

import os
import tempfile
import traceback
from typing import Optional

from fastapi import FastAPI, HTTPException, UploadFile, File, Form
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from models import PlayerState
from inventory_loader import Inventory, load_inventory
from item_database import ItemDatabase
from priority_engine import PriorityEngine
from prioritizer import (
    build_engine,
    build_export_lines,
    prioritized_path,
    transform_all_sets,
)
from settings import resolve_settings, SCRIPT_DIR
from lua_parser import LuaParseError


# =============================================================================
# FastAPI App Setup
# =============================================================================

app = FastAPI(
    title="GearSwap Prioritizer",
    description="Inject HP priorities into GearSwap sets",
    version="1.0.0"
)

# CORS middleware for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Global State
# =============================================================================

class AppState:
    """Global application state."""
    def __init__(self):
        self.settings = resolve_settings()
        self.item_db: Optional[ItemDatabase] = None
        self.inventory: Optional[Inventory] = None
        self.inventory_filename: str = ""
        self.engine: Optional[PriorityEngine] = None

    def get_engine(self) -> PriorityEngine:
        """Engine for the current inventory; rebuilt when a new one is uploaded."""
        if self.engine is None:
            self.engine = build_engine(self.settings, self.inventory, self.item_db)
            self.item_db = self.engine.item_db
            if self.inventory is None and self.engine.aug_index.inventory is not None:
                self.inventory = self.engine.aug_index.inventory
                self.inventory_filename = self.settings.inventory_path.name
        return self.engine

    def set_inventory(self, inventory: Inventory, filename: str):
        self.inventory = inventory
        self.inventory_filename = filename
        self.engine = None

state = AppState()


# =============================================================================
# Pydantic Models for API
# =============================================================================

class StatusResponse(BaseModel):
    status: str
    inventory_loaded: bool
    inventory_filename: str
    item_count: int
    resources_loaded: bool


class PrioritizeResponse(BaseModel):
    """Response from prioritizing a Lua file."""
    success: bool
    filename: str
    output_filename: Optional[str] = None
    changed: int = 0
    assignments: int = 0
    lua_content: Optional[str] = None
    error: Optional[str] = None


class ExportResponse(BaseModel):
    success: bool
    player: str
    lua_content: Optional[str] = None
    error: Optional[str] = None


# =============================================================================
# API Endpoints
# =============================================================================

@app.get("/api/status", response_model=StatusResponse)
async def get_status():
    """Get the current application status."""
    engine = state.get_engine()
    return StatusResponse(
        status="ready" if state.inventory else "no_inventory",
        inventory_loaded=state.inventory is not None,
        inventory_filename=state.inventory_filename,
        item_count=len(state.inventory.items) if state.inventory else 0,
        resources_loaded=bool(engine.item_db.items),
    )


@app.post("/api/upload/inventory")
async def upload_inventory(file: UploadFile = File(...)):
    """Upload an inventory CSV file."""
    temp_path = None
    try:
        content = await file.read()
        with tempfile.NamedTemporaryFile(mode='wb', suffix='.csv', delete=False) as f:
            f.write(content)
            temp_path = f.name

        state.set_inventory(load_inventory(temp_path), file.filename)

        return {
            "success": True,
            "filename": file.filename,
            "item_count": len(state.inventory.items),
            "message": f"Loaded {len(state.inventory.items)} items"
        }
    except Exception as e:
        return {
            "success": False,
            "error": str(e),
            "traceback": traceback.format_exc()
        }
    finally:
        if temp_path and os.path.exists(temp_path):
            os.unlink(temp_path)


@app.post("/api/prioritize", response_model=PrioritizeResponse)
async def prioritize_lua_file(file: UploadFile = File(...),
                              max_hp: Optional[int] = Form(None)):
    """
    Inject priorities into an uploaded GearSwap Lua file.

    The rewritten file is returned as lua_content; nothing is written on
    the server.
    """
    filename = file.filename or "gearswap.lua"
    try:
        content = await file.read()
        result = transform_all_sets(content.decode('utf-8'), state.get_engine(), max_hp)
        return PrioritizeResponse(
            success=True,
            filename=filename,
            output_filename=prioritized_path(SCRIPT_DIR / filename).name,
            changed=result.changed,
            assignments=result.assignments,
            lua_content=result.text,
        )
    except (LuaParseError, UnicodeDecodeError) as e:
        return PrioritizeResponse(success=False, filename=filename, error=str(e))


@app.post("/api/export", response_model=ExportResponse)
async def export_equipped(player: str = Form("PLAYER"), max_hp: Optional[int] = Form(None)):
    """Export the equipped gear of the uploaded inventory as a prioritized set."""
    if state.inventory is None:
        raise HTTPException(status_code=400, detail="No inventory loaded")

    lines = build_export_lines(state.inventory, state.get_engine(), PlayerState(name=player, max_hp=max_hp))
    return ExportResponse(success=True, player=player, lua_content='\n'.join(lines))


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    print("=" * 60)
    print("GearSwap Prioritizer - Web Server")
    print("=" * 60)
    print(f"Resources: {state.settings.resources_dir}")
    print()
    print("Starting server at http://localhost:8000")
    print("API docs available at http://localhost:8000/docs")
    print("=" * 60)
    uvicorn.run(app, host="127.0.0.1", port=8000)
