# Metal building rate table. Money to the cent, multipliers exact.
# Lookups that miss (a size only sold for the other door type, an unknown
# thickness) price as zero so a half-finished configuration still quotes.

import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Dict

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


# Building size options (feet)
WIDTH_OPTIONS = list(range(12, 41, 2))
LENGTH_OPTIONS = [20, 21, 25, 26, 30, 31, 35, 36, 40, 41, 45, 46, 50, 55,
                  60, 65, 70, 75, 80, 85, 90, 95, 100]
HEIGHT_OPTIONS = list(range(8, 17))

# Concrete thickness options (inches)
THICKNESS_OPTIONS = [4, 5, 6]

# Doors must sit at least this far below the eave (feet)
DOOR_HEIGHT_CLEARANCE_FT = 2

# Door and window quantity bounds per line
MIN_QUANTITY = 1
MAX_QUANTITY = 10


class RateTable(BaseModel):
    """Every rate the pricing engine reads. Swappable via a JSON override."""

    model_config = ConfigDict(frozen=True)

    base_price_per_sqft: Decimal = Decimal("8.50")
    leg_type_multipliers: Dict[str, Decimal] = {
        "standard": Decimal("1.00"),
        "certified": Decimal("1.15"),
    }

    door_prices: Dict[str, Dict[str, Decimal]] = {
        "walk": {
            "3x7": Decimal("350.00"),
            "4x7": Decimal("400.00"),
            "6x7": Decimal("550.00"),
            "8x8": Decimal("0"),
            "10x10": Decimal("0"),
            "12x12": Decimal("0"),
        },
        "roll_up": {
            "3x7": Decimal("0"),
            "4x7": Decimal("0"),
            "6x7": Decimal("0"),
            "8x8": Decimal("850.00"),
            "10x10": Decimal("1100.00"),
            "12x12": Decimal("1450.00"),
        },
    }
    window_prices: Dict[str, Decimal] = {
        "30x36": Decimal("175.00"),
        "36x48": Decimal("225.00"),
    }

    # Flat price per level. "full" is its own price, not wall + ceiling
    insulation_prices: Dict[str, Decimal] = {
        "none": Decimal("0"),
        "ceiling": Decimal("1.25"),
        "wall": Decimal("1.75"),
        "full": Decimal("2.50"),
    }
    ventilation_price: Decimal = Decimal("150.00")
    gutters_per_linear_ft: Decimal = Decimal("4.50")

    # Slab and turnkey are per sqft, piers are per pier
    concrete_prices: Dict[str, Decimal] = {
        "none": Decimal("0"),
        "piers": Decimal("125.00"),
        "slab": Decimal("6.50"),
        "turnkey": Decimal("8.75"),
    }
    concrete_thickness_multipliers: Dict[int, Decimal] = {
        4: Decimal("1.00"),
        5: Decimal("1.15"),
        6: Decimal("1.30"),
    }
    leg_spacing_ft: int = 5

    labor_per_sqft: Decimal = Decimal("3.50")
    delivery_base: Decimal = Decimal("500.00")
    delivery_per_mile: Decimal = Decimal("3.50")

    deposit_fraction: Decimal = Decimal("0.35")


DEFAULT_RATES = RateTable()


def load_rate_table(path) -> RateTable:
    """
    Build a RateTable from a JSON file. Keys left out of the file keep
    their default values; nested tables are replaced whole.
    """
    raw = json.loads(Path(path).read_text())
    rates = RateTable.model_validate(raw)
    logger.info(f"Loaded rate table override from {path} ({len(raw)} keys)")
    return rates
