"""
Configuration Store — single source of truth for the estimate in progress.

Owns customer, building, accessories, door positions, colors, concrete,
contract, wizard position and the current PricingBreakdown. Every mutation
that touches a price-relevant field recomputes pricing before it returns,
so configuration and breakdown never disagree.

Navigation out of range and unknown door/window ids are silent no-ops.
Public methods hold a re-entrant lock, so concurrent requests see each
mutation and its repricing as one step.
Payloads are validated by the Update schemas before they get here.
"""

import functools
import logging
import threading
import uuid
from decimal import Decimal

from .exceptions import PersistenceError
from .pricing_engine import PricingEngine
from .pricing_rates import DOOR_HEIGHT_CLEARANCE_FT, MAX_QUANTITY, MIN_QUANTITY
from .schemas import (
    AccessoriesConfig,
    AccessoriesUpdate,
    BuildingConfig,
    BuildingConfigUpdate,
    ColorConfig,
    ColorConfigUpdate,
    ConcreteConfig,
    ConcreteConfigUpdate,
    ContractConfig,
    ContractUpdate,
    CustomerInfo,
    CustomerInfoUpdate,
    DoorConfig,
    DoorUpdate,
    EstimateSnapshot,
    EstimateState,
    PricingBreakdown,
    Wall,
    WindowConfig,
    WindowUpdate,
    merge,
)
from .wizard import CONTRACT_SECTIONS, ESTIMATE_STEPS, StepCounter

logger = logging.getLogger(__name__)


def new_door_id() -> str:
    return uuid.uuid4().hex


def new_window_id() -> str:
    return uuid.uuid4().hex


def door_position_key(door_id: str, view: str) -> str:
    return f"{door_id}-{view}"


def clamp_quantity(quantity: int) -> int:
    return max(MIN_QUANTITY, min(MAX_QUANTITY, quantity))


def max_door_height(building: BuildingConfig) -> int:
    return building.height - DOOR_HEIGHT_CLEARANCE_FT


def _synchronized(method):
    """Run a store method under the store lock."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


class ConfigurationStore:
    """
    The estimate being built. Create one per customer session and pass it
    around; there is no module-level instance.

    Args:
        engine: PricingEngine used for every recompute
        persistence: object with save(snapshot) and load() -> snapshot | None,
            optionally delete() to drop the saved copy on reset; or None to
            run without durable storage
        delivery_distance_miles: road miles used for the delivery line
    """

    def __init__(self, engine: PricingEngine = None, persistence=None,
                 delivery_distance_miles=0):
        self._lock = threading.RLock()
        self.engine = engine or PricingEngine()
        self.persistence = persistence
        self._steps = StepCounter(ESTIMATE_STEPS, "step")
        self._sections = StepCounter(CONTRACT_SECTIONS, "contract section")
        self._delivery_distance_miles = Decimal(str(delivery_distance_miles))
        self._apply_snapshot(EstimateSnapshot())
        self._pricing = PricingBreakdown()

    # --- Read accessors ---
    # Records are frozen; deep copies keep the dict fields private too.

    @property
    def step(self) -> int:
        return self._steps.position

    @property
    def contract_section(self) -> int:
        return self._sections.position

    @property
    def customer(self) -> CustomerInfo:
        return self._customer

    @property
    def building(self) -> BuildingConfig:
        return self._building

    @property
    def accessories(self) -> AccessoriesConfig:
        return self._accessories.model_copy(deep=True)

    @property
    def door_positions(self) -> dict:
        return dict(self._door_positions)

    @property
    def colors(self) -> ColorConfig:
        return self._colors

    @property
    def concrete(self) -> ConcreteConfig:
        return self._concrete

    @property
    def contract(self) -> ContractConfig:
        return self._contract

    @property
    def pricing(self) -> PricingBreakdown:
        return self._pricing

    @property
    def delivery_distance_miles(self) -> Decimal:
        return self._delivery_distance_miles

    @_synchronized
    def snapshot(self) -> EstimateSnapshot:
        """The persisted subset: no wizard position, no pricing."""
        return EstimateSnapshot(
            customer=self._customer,
            building=self._building,
            accessories=self._accessories,
            door_positions=self._door_positions,
            colors=self._colors,
            concrete=self._concrete,
            contract=self._contract,
        ).model_copy(deep=True)

    @_synchronized
    def state(self) -> EstimateState:
        """Everything the UI renders, in one record."""
        return EstimateState(
            **dict(self.snapshot()),
            step=self.step,
            contract_section=self.contract_section,
            delivery_distance_miles=self._delivery_distance_miles,
            pricing=self._pricing,
        )

    # --- Navigation ---

    @_synchronized
    def advance_step(self):
        if self._steps.advance():
            self.calculate_pricing()

    @_synchronized
    def retreat_step(self):
        # Going back changes nothing that is priced
        self._steps.retreat()

    @_synchronized
    def go_to_step(self, step: int):
        if self._steps.go_to(step):
            self.calculate_pricing()

    @_synchronized
    def advance_contract_section(self):
        self._sections.advance()

    @_synchronized
    def retreat_contract_section(self):
        self._sections.retreat()

    @_synchronized
    def go_to_contract_section(self, section: int):
        self._sections.go_to(section)

    # --- Setters ---

    @_synchronized
    def set_customer_info(self, update: CustomerInfoUpdate):
        self._customer = merge(self._customer, update)

    @_synchronized
    def set_building_config(self, update: BuildingConfigUpdate):
        self._building = merge(self._building, update)
        if "height" in update.model_fields_set:
            self._accessories = self._accessories.model_copy(update={
                "doors": {d.id: self._fit_door(d) for d in self._accessories.doors.values()},
            })
        self.calculate_pricing()

    @_synchronized
    def set_accessories(self, update: AccessoriesUpdate):
        accessories = merge(self._accessories, update)
        if "doors" in update.model_fields_set:
            accessories = accessories.model_copy(update={
                "doors": {d.id: self._fit_door(d) for d in accessories.doors.values()},
            })
            self._forget_door_positions(self._accessories.doors.keys() - accessories.doors.keys())
        if "windows" in update.model_fields_set:
            accessories = accessories.model_copy(update={
                "windows": {w.id: self._fit_window(w) for w in accessories.windows.values()},
            })
        self._accessories = accessories
        self.calculate_pricing()

    @_synchronized
    def set_colors(self, update: ColorConfigUpdate):
        self._colors = merge(self._colors, update)

    @_synchronized
    def set_concrete_config(self, update: ConcreteConfigUpdate):
        self._concrete = merge(self._concrete, update)
        self.calculate_pricing()

    @_synchronized
    def set_contract_data(self, update: ContractUpdate):
        self._contract = merge(self._contract, update)

    @_synchronized
    def set_door_position(self, door_id: str, view, position: float):
        """
        Remember where a door sits in a given preview view. Not priced.
        The view is a wall name; anything else raises ValueError.
        """
        view = Wall(view)
        self._door_positions = {
            **self._door_positions,
            door_position_key(door_id, view.value): position,
        }

    @_synchronized
    def set_delivery_distance(self, miles):
        miles = Decimal(str(miles))
        if miles < 0:
            logger.debug(f"Ignoring negative delivery distance {miles}")
            return
        self._delivery_distance_miles = miles
        self.calculate_pricing()

    # --- Doors ---

    @_synchronized
    def add_door(self, door: DoorConfig):
        """Add a door under its caller-generated id. A repeated id is ignored."""
        doors = self._accessories.doors
        if door.id in doors:
            logger.warning(f"Door id {door.id!r} already in use, not adding")
            return
        self._set_doors({**doors, door.id: self._fit_door(door)})
        self.calculate_pricing()

    @_synchronized
    def remove_door(self, door_id: str):
        doors = self._accessories.doors
        if door_id in doors:
            self._set_doors({k: d for k, d in doors.items() if k != door_id})
            self._forget_door_positions([door_id])
        else:
            logger.debug(f"remove_door: no door {door_id!r}")
        self.calculate_pricing()

    @_synchronized
    def update_door(self, door_id: str, update: DoorUpdate):
        doors = self._accessories.doors
        if door_id in doors:
            updated = self._fit_door(merge(doors[door_id], update))
            self._set_doors({**doors, door_id: updated})
        else:
            logger.debug(f"update_door: no door {door_id!r}")
        self.calculate_pricing()

    def _set_doors(self, doors: dict):
        self._accessories = self._accessories.model_copy(update={"doors": doors})

    def _forget_door_positions(self, door_ids):
        stale = {door_position_key(door_id, view.value) for door_id in door_ids for view in Wall}
        self._door_positions = {
            k: v for k, v in self._door_positions.items() if k not in stale
        }

    def _fit_door(self, door: DoorConfig) -> DoorConfig:
        """
        Clamp quantity to 1..10 and height to the eave clearance.
        A clamped door with a known width gets its "WxH" size rebuilt.
        """
        changes = {}
        quantity = clamp_quantity(door.quantity)
        if quantity != door.quantity:
            changes["quantity"] = quantity

        limit = max_door_height(self._building)
        if door.height is not None and door.height > limit:
            logger.warning(
                f"Door {door.id} height {door.height}' exceeds {limit}' "
                f"clearance for a {self._building.height}' building, clamping"
            )
            changes["height"] = limit
            if door.width is not None:
                changes["size"] = f"{door.width}x{limit}"

        return door.model_copy(update=changes) if changes else door

    # --- Windows ---

    @_synchronized
    def add_window(self, window: WindowConfig):
        windows = self._accessories.windows
        if window.id in windows:
            logger.warning(f"Window id {window.id!r} already in use, not adding")
            return
        self._set_windows({**windows, window.id: self._fit_window(window)})
        self.calculate_pricing()

    @_synchronized
    def remove_window(self, window_id: str):
        windows = self._accessories.windows
        if window_id in windows:
            self._set_windows({k: w for k, w in windows.items() if k != window_id})
        else:
            logger.debug(f"remove_window: no window {window_id!r}")
        self.calculate_pricing()

    @_synchronized
    def update_window(self, window_id: str, update: WindowUpdate):
        windows = self._accessories.windows
        if window_id in windows:
            updated = self._fit_window(merge(windows[window_id], update))
            self._set_windows({**windows, window_id: updated})
        else:
            logger.debug(f"update_window: no window {window_id!r}")
        self.calculate_pricing()

    def _set_windows(self, windows: dict):
        self._accessories = self._accessories.model_copy(update={"windows": windows})

    def _fit_window(self, window: WindowConfig) -> WindowConfig:
        quantity = clamp_quantity(window.quantity)
        if quantity != window.quantity:
            return window.model_copy(update={"quantity": quantity})
        return window

    # --- Pricing ---

    @_synchronized
    def calculate_pricing(self) -> PricingBreakdown:
        self._pricing = self.engine.compute_pricing(
            self._building,
            self._accessories,
            self._concrete,
            delivery_distance_miles=self._delivery_distance_miles,
        )
        return self._pricing

    # --- Lifecycle ---

    @_synchronized
    def reset_estimate(self):
        """
        Back to a blank estimate: defaults everywhere, step and section 1,
        all-zero pricing. A saved snapshot is deleted too, so a later load
        cannot bring the old estimate back.
        """
        self._apply_snapshot(EstimateSnapshot())
        self._steps.reset()
        self._sections.reset()
        self._pricing = PricingBreakdown()
        delete = getattr(self.persistence, "delete", None)
        if delete is not None:
            delete()

    @_synchronized
    def save_estimate(self):
        """Persist the snapshot. PersistenceError propagates; memory is untouched."""
        if self.persistence is None:
            raise PersistenceError("No persistence adapter configured")
        self.persistence.save(self.snapshot())

    @_synchronized
    def load_estimate(self) -> bool:
        """
        Restore the saved snapshot and reprice.

        Returns True if a snapshot was restored. With nothing saved the
        current configuration is kept; if the adapter fails the store falls
        back to defaults. Either way pricing is recomputed.
        """
        restored = False
        if self.persistence is None:
            logger.debug("load_estimate: no persistence adapter configured")
        else:
            try:
                snapshot = self.persistence.load()
            except PersistenceError as e:
                logger.warning(f"Could not load saved estimate, using defaults: {e}")
                self._apply_snapshot(EstimateSnapshot())
            else:
                if snapshot is not None:
                    self._apply_snapshot(snapshot)
                    restored = True
        self.calculate_pricing()
        return restored

    def _apply_snapshot(self, snapshot: EstimateSnapshot):
        snapshot = snapshot.model_copy(deep=True)
        self._customer = snapshot.customer
        self._building = snapshot.building
        self._accessories = snapshot.accessories
        self._door_positions = dict(snapshot.door_positions)
        self._colors = snapshot.colors
        self._concrete = snapshot.concrete
        self._contract = snapshot.contract
