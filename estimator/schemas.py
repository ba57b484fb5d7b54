import enum
from decimal import Decimal
from functools import partial
from typing import Annotated, ClassVar, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, model_validator

from .colors import DEFAULT_COLORS
from .pricing_rates import HEIGHT_OPTIONS, LENGTH_OPTIONS, THICKNESS_OPTIONS, WIDTH_OPTIONS


# --- Enums ---

class LegType(str, enum.Enum):
    STANDARD = "standard"
    CERTIFIED = "certified"


class Wall(str, enum.Enum):
    """A side of the building. Also used as the preview camera view."""
    FRONT = "front"
    BACK = "back"
    LEFT = "left"
    RIGHT = "right"


class DoorType(str, enum.Enum):
    WALK = "walk"
    ROLL_UP = "roll_up"


class WindowSize(str, enum.Enum):
    W30X36 = "30x36"
    W36X48 = "36x48"


class InsulationLevel(str, enum.Enum):
    NONE = "none"
    CEILING = "ceiling"
    WALL = "wall"
    FULL = "full"


class ConcreteType(str, enum.Enum):
    NONE = "none"
    PIERS = "piers"
    SLAB = "slab"
    TURNKEY = "turnkey"


# --- Constrained field types ---

def _check_option(value, options, label):
    if value not in options:
        raise ValueError(f"{label} {value} is not one of {options}")
    return value


def _check_keys(items: dict, label: str):
    for key, item in items.items():
        if key != item.id:
            raise ValueError(f"{label} keyed as {key!r} has id {item.id!r}")
    return items


Width = Annotated[int, AfterValidator(partial(_check_option, options=WIDTH_OPTIONS, label="width"))]
Length = Annotated[int, AfterValidator(partial(_check_option, options=LENGTH_OPTIONS, label="length"))]
Height = Annotated[int, AfterValidator(partial(_check_option, options=HEIGHT_OPTIONS, label="height"))]
Thickness = Annotated[int, AfterValidator(partial(_check_option, options=THICKNESS_OPTIONS, label="thickness"))]


# --- Records ---
# Frozen so nothing outside the store can edit state in place.

class Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Update(BaseModel):
    """
    Partial update — only the fields the caller set are merged.
    An explicit null is refused unless the field is listed in `nullable`.
    """
    model_config = ConfigDict(extra="forbid")

    nullable: ClassVar[frozenset] = frozenset()

    @model_validator(mode="after")
    def check_nulls(self):
        for name in self.model_fields_set - self.nullable:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


def merge(record, update):
    """Shallow merge of an Update into a Record. Returns a new Record."""
    return record.model_copy(
        update={name: getattr(update, name) for name in update.model_fields_set}
    )


class CustomerInfo(Record):
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""


class CustomerInfoUpdate(Update):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None


class Breezeway(Record):
    front_back: bool = False
    side_side: bool = False


class BuildingConfig(Record):
    width: Width = 24
    length: Length = 30
    height: Height = 10
    leg_type: LegType = LegType.STANDARD
    building_view: Wall = Wall.FRONT
    breezeway: Breezeway = Breezeway()

    @property
    def square_feet(self) -> int:
        return self.width * self.length

    @property
    def perimeter_ft(self) -> int:
        return 2 * (self.width + self.length)


class BuildingConfigUpdate(Update):
    width: Optional[Width] = None
    length: Optional[Length] = None
    height: Optional[Height] = None
    leg_type: Optional[LegType] = None
    building_view: Optional[Wall] = None
    breezeway: Optional[Breezeway] = None


class DoorConfig(Record):
    id: str
    type: DoorType
    size: str  # "WxH" in feet, e.g. "3x7" or "10x10"
    wall: Wall = Wall.FRONT
    width: Optional[int] = None
    height: Optional[int] = None
    position: Optional[float] = None  # feet from the left edge of the wall
    quantity: int = 1


class DoorUpdate(Update):
    """Door edits. Type and id are fixed at creation."""
    nullable: ClassVar[frozenset] = frozenset({"width", "height", "position"})

    size: Optional[str] = None
    wall: Optional[Wall] = None
    width: Optional[int] = None
    height: Optional[int] = None
    position: Optional[float] = None
    quantity: Optional[int] = None


class WindowConfig(Record):
    id: str
    size: WindowSize = WindowSize.W30X36
    wall: Wall = Wall.FRONT
    quantity: int = 1


class WindowUpdate(Update):
    size: Optional[WindowSize] = None
    wall: Optional[Wall] = None
    quantity: Optional[int] = None


DoorMap = Annotated[Dict[str, DoorConfig], AfterValidator(partial(_check_keys, label="door"))]
WindowMap = Annotated[Dict[str, WindowConfig], AfterValidator(partial(_check_keys, label="window"))]


class AccessoriesConfig(Record):
    # Keyed by id, insertion ordered. Door type lives on the door.
    doors: DoorMap = {}
    windows: WindowMap = {}
    insulation: InsulationLevel = InsulationLevel.NONE
    ventilation: bool = False
    gutters: bool = False

    @property
    def walk_doors(self) -> List[DoorConfig]:
        return [d for d in self.doors.values() if d.type == DoorType.WALK]

    @property
    def roll_up_doors(self) -> List[DoorConfig]:
        return [d for d in self.doors.values() if d.type == DoorType.ROLL_UP]


class AccessoriesUpdate(Update):
    doors: Optional[DoorMap] = None
    windows: Optional[WindowMap] = None
    insulation: Optional[InsulationLevel] = None
    ventilation: Optional[bool] = None
    gutters: Optional[bool] = None


class ColorConfig(Record):
    roof: str = DEFAULT_COLORS["roof"]
    walls: str = DEFAULT_COLORS["walls"]
    trim: str = DEFAULT_COLORS["trim"]


class ColorConfigUpdate(Update):
    roof: Optional[str] = None
    walls: Optional[str] = None
    trim: Optional[str] = None


class ConcreteConfig(Record):
    type: ConcreteType = ConcreteType.NONE
    existing_pad: bool = False
    thickness: Thickness = 4  # inches


class ConcreteConfigUpdate(Update):
    type: Optional[ConcreteType] = None
    existing_pad: Optional[bool] = None
    thickness: Optional[Thickness] = None


class SignatureData(Record):
    contractor: Optional[str] = None
    customer: Optional[str] = None
    contractor_date: Optional[str] = None
    customer_date: Optional[str] = None


class ContractConfig(Record):
    signatures: SignatureData = SignatureData()
    agreed_to_terms: bool = False
    deposit_paid: bool = False


class ContractUpdate(Update):
    signatures: Optional[SignatureData] = None
    agreed_to_terms: Optional[bool] = None
    deposit_paid: Optional[bool] = None


class PricingBreakdown(Record):
    """Derived totals. grand_total is always the sum of the five sub-totals."""
    base_price: Decimal = Decimal("0.00")
    accessories_total: Decimal = Decimal("0.00")
    concrete_total: Decimal = Decimal("0.00")
    labor_total: Decimal = Decimal("0.00")
    delivery_total: Decimal = Decimal("0.00")
    grand_total: Decimal = Decimal("0.00")
    deposit_amount: Decimal = Decimal("0.00")


# --- Snapshot / full state ---

class EstimateSnapshot(Record):
    """What the persistence adapter keeps. No wizard position, no pricing."""
    customer: CustomerInfo = CustomerInfo()
    building: BuildingConfig = BuildingConfig()
    accessories: AccessoriesConfig = AccessoriesConfig()
    door_positions: Dict[str, float] = {}  # "{door_id}-{view}" -> offset
    colors: ColorConfig = ColorConfig()
    concrete: ConcreteConfig = ConcreteConfig()
    contract: ContractConfig = ContractConfig()


class EstimateState(EstimateSnapshot):
    step: int
    contract_section: int
    delivery_distance_miles: Decimal
    pricing: PricingBreakdown

    @model_validator(mode="after")
    def check_grand_total(self):
        p = self.pricing
        parts = (p.base_price + p.accessories_total + p.concrete_total
                 + p.labor_total + p.delivery_total)
        if parts != p.grand_total:
            raise ValueError(f"grand_total {p.grand_total} != sum of parts {parts}")
        return self
