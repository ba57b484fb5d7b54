"""
Estimate API — the UI's read and write path into the ConfigurationStore.

GET    /api/estimate                          — Full state (config + pricing + wizard)
POST   /api/estimate/step/next|previous|{n}   — Wizard navigation
POST   /api/estimate/contract-section/next|previous|{n}
GET    /api/estimate/colors                   — Current colors with palette names
PATCH  /api/estimate/customer|building|accessories|colors|concrete|contract
PUT    /api/estimate/delivery-distance        — Delivery miles for pricing
PUT    /api/estimate/door-positions/{door_id}/{view}
POST   /api/estimate/doors                    — Add a door (id generated if omitted)
PATCH  /api/estimate/doors/{id}  DELETE /api/estimate/doors/{id}
POST   /api/estimate/windows     PATCH/DELETE /api/estimate/windows/{id}
POST   /api/estimate/pricing|reset|save|load

Every endpoint answers with the full EstimateState. Payloads are checked by
the Update schemas (unknown fields → 422) before the store sees them.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from ..colors import color_name
from ..exceptions import PersistenceError
from ..schemas import (
    AccessoriesUpdate,
    BuildingConfigUpdate,
    ColorConfigUpdate,
    ConcreteConfigUpdate,
    ContractUpdate,
    CustomerInfoUpdate,
    DoorConfig,
    DoorType,
    DoorUpdate,
    EstimateState,
    Wall,
    WindowConfig,
    WindowSize,
    WindowUpdate,
)
from ..store import ConfigurationStore, new_door_id, new_window_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/estimate", tags=["estimate"])


def get_store(request: Request) -> ConfigurationStore:
    """The application's store, created at startup."""
    return request.app.state.store


# --- Request schemas ---

class DoorCreate(BaseModel):
    id: Optional[str] = None
    type: DoorType
    size: str
    wall: Wall = Wall.FRONT
    width: Optional[int] = None
    height: Optional[int] = None
    position: Optional[float] = None
    quantity: int = 1

    model_config = ConfigDict(extra="forbid")


class WindowCreate(BaseModel):
    id: Optional[str] = None
    size: WindowSize = WindowSize.W30X36
    wall: Wall = Wall.FRONT
    quantity: int = 1

    model_config = ConfigDict(extra="forbid")


class PositionRequest(BaseModel):
    position: float


class DistanceRequest(BaseModel):
    miles: float = Field(ge=0)


# --- Read ---

@router.get("", response_model=EstimateState)
def get_estimate(store: ConfigurationStore = Depends(get_store)):
    return store.state()


# --- Navigation ---

@router.post("/step/next", response_model=EstimateState)
def next_step(store: ConfigurationStore = Depends(get_store)):
    store.advance_step()
    return store.state()


@router.post("/step/previous", response_model=EstimateState)
def previous_step(store: ConfigurationStore = Depends(get_store)):
    store.retreat_step()
    return store.state()


@router.post("/step/{step}", response_model=EstimateState)
def go_to_step(step: int, store: ConfigurationStore = Depends(get_store)):
    """Out-of-range steps are ignored, not rejected."""
    store.go_to_step(step)
    return store.state()


@router.post("/contract-section/next", response_model=EstimateState)
def next_contract_section(store: ConfigurationStore = Depends(get_store)):
    store.advance_contract_section()
    return store.state()


@router.post("/contract-section/previous", response_model=EstimateState)
def previous_contract_section(store: ConfigurationStore = Depends(get_store)):
    store.retreat_contract_section()
    return store.state()


@router.post("/contract-section/{section}", response_model=EstimateState)
def go_to_contract_section(section: int, store: ConfigurationStore = Depends(get_store)):
    store.go_to_contract_section(section)
    return store.state()


# --- Section setters ---

@router.patch("/customer", response_model=EstimateState)
def update_customer(update: CustomerInfoUpdate, store: ConfigurationStore = Depends(get_store)):
    store.set_customer_info(update)
    return store.state()


@router.patch("/building", response_model=EstimateState)
def update_building(update: BuildingConfigUpdate, store: ConfigurationStore = Depends(get_store)):
    store.set_building_config(update)
    return store.state()


@router.patch("/accessories", response_model=EstimateState)
def update_accessories(update: AccessoriesUpdate, store: ConfigurationStore = Depends(get_store)):
    store.set_accessories(update)
    return store.state()


@router.get("/colors")
def get_color_names(store: ConfigurationStore = Depends(get_store)):
    """Current colors with their palette names, for summaries."""
    colors = store.colors
    return {
        part: {"code": code, "name": color_name(part, code)}
        for part, code in colors.model_dump().items()
    }


@router.patch("/colors", response_model=EstimateState)
def update_colors(update: ColorConfigUpdate, store: ConfigurationStore = Depends(get_store)):
    store.set_colors(update)
    return store.state()


@router.patch("/concrete", response_model=EstimateState)
def update_concrete(update: ConcreteConfigUpdate, store: ConfigurationStore = Depends(get_store)):
    store.set_concrete_config(update)
    return store.state()


@router.patch("/contract", response_model=EstimateState)
def update_contract(update: ContractUpdate, store: ConfigurationStore = Depends(get_store)):
    store.set_contract_data(update)
    return store.state()


@router.put("/delivery-distance", response_model=EstimateState)
def set_delivery_distance(request: DistanceRequest, store: ConfigurationStore = Depends(get_store)):
    store.set_delivery_distance(request.miles)
    return store.state()


@router.put("/door-positions/{door_id}/{view}", response_model=EstimateState)
def set_door_position(door_id: str, view: Wall, request: PositionRequest,
                      store: ConfigurationStore = Depends(get_store)):
    store.set_door_position(door_id, view.value, request.position)
    return store.state()


# --- Doors ---

@router.post("/doors", response_model=EstimateState)
def add_door(request: DoorCreate, store: ConfigurationStore = Depends(get_store)):
    data = request.model_dump()
    data["id"] = data["id"] or new_door_id()
    store.add_door(DoorConfig(**data))
    return store.state()


@router.patch("/doors/{door_id}", response_model=EstimateState)
def update_door(door_id: str, update: DoorUpdate, store: ConfigurationStore = Depends(get_store)):
    store.update_door(door_id, update)
    return store.state()


@router.delete("/doors/{door_id}", response_model=EstimateState)
def remove_door(door_id: str, store: ConfigurationStore = Depends(get_store)):
    store.remove_door(door_id)
    return store.state()


# --- Windows ---

@router.post("/windows", response_model=EstimateState)
def add_window(request: WindowCreate, store: ConfigurationStore = Depends(get_store)):
    data = request.model_dump()
    data["id"] = data["id"] or new_window_id()
    store.add_window(WindowConfig(**data))
    return store.state()


@router.patch("/windows/{window_id}", response_model=EstimateState)
def update_window(window_id: str, update: WindowUpdate,
                  store: ConfigurationStore = Depends(get_store)):
    store.update_window(window_id, update)
    return store.state()


@router.delete("/windows/{window_id}", response_model=EstimateState)
def remove_window(window_id: str, store: ConfigurationStore = Depends(get_store)):
    store.remove_window(window_id)
    return store.state()


# --- Pricing and lifecycle ---

@router.post("/pricing", response_model=EstimateState)
def calculate_pricing(store: ConfigurationStore = Depends(get_store)):
    store.calculate_pricing()
    return store.state()


@router.post("/reset", response_model=EstimateState)
def reset_estimate(store: ConfigurationStore = Depends(get_store)):
    try:
        store.reset_estimate()
    except PersistenceError as e:
        # The in-memory estimate is already blank; only the saved copy survived
        logger.warning(f"Reset could not clear saved estimate: {e}")
        raise HTTPException(status_code=503, detail="Estimate reset, but saved copy could not be cleared")
    return store.state()


@router.post("/save", response_model=EstimateState)
def save_estimate(store: ConfigurationStore = Depends(get_store)):
    try:
        store.save_estimate()
    except PersistenceError as e:
        logger.warning(f"Save failed: {e}")
        raise HTTPException(status_code=503, detail="Estimate could not be saved")
    return store.state()


@router.post("/load", response_model=EstimateState)
def load_estimate(store: ConfigurationStore = Depends(get_store)):
    store.load_estimate()
    return store.state()
