"""
Pricing Engine.

Turns the building, accessories and concrete configuration into a
PricingBreakdown. Pure math — no I/O, no state beyond the rate table.
Square footage × rate, unit price × quantity, subtotal × multiplier.

Input: BuildingConfig + AccessoriesConfig + ConcreteConfig (+ delivery miles)
Output: PricingBreakdown
"""

import logging
import math
from decimal import ROUND_HALF_UP, Decimal

from .pricing_rates import DEFAULT_RATES, RateTable
from .schemas import (
    AccessoriesConfig,
    BuildingConfig,
    ConcreteConfig,
    ConcreteType,
    PricingBreakdown,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_cents(amount: Decimal) -> Decimal:
    """Round a money amount to the cent, half up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


class PricingEngine:
    """
    Computes the estimate breakdown from a configuration.

    Every subtotal is rounded to the cent before it is summed, so the grand
    total is exactly the sum of the figures the customer sees.
    """

    def __init__(self, rates: RateTable = DEFAULT_RATES):
        self.rates = rates

    def compute_pricing(self, building: BuildingConfig, accessories: AccessoriesConfig,
                        concrete: ConcreteConfig, delivery_distance_miles=0) -> PricingBreakdown:
        """
        Args:
            building: dimensions and leg type
            accessories: doors, windows, insulation, ventilation, gutters
            concrete: foundation type and thickness
            delivery_distance_miles: road miles from the yard, 0 if unknown

        Returns:
            A new PricingBreakdown. Inputs are only read.
        """
        base_price = self._calculate_base_price(building)
        accessories_total = self._calculate_accessories_total(building, accessories)
        concrete_total = self._calculate_concrete_total(building, concrete)
        labor_total = self._calculate_labor_total(building)
        delivery_total = self._calculate_delivery_total(delivery_distance_miles)

        grand_total = (base_price + accessories_total + concrete_total
                       + labor_total + delivery_total)
        deposit_amount = to_cents(grand_total * self.rates.deposit_fraction)

        logger.debug(
            f"Priced {building.width}x{building.length}: base={base_price} "
            f"accessories={accessories_total} concrete={concrete_total} "
            f"labor={labor_total} delivery={delivery_total} total={grand_total}"
        )

        return PricingBreakdown(
            base_price=base_price,
            accessories_total=accessories_total,
            concrete_total=concrete_total,
            labor_total=labor_total,
            delivery_total=delivery_total,
            grand_total=grand_total,
            deposit_amount=deposit_amount,
        )

    def _calculate_base_price(self, building: BuildingConfig) -> Decimal:
        """sqft × base rate, then × leg-type multiplier."""
        frame = building.square_feet * self.rates.base_price_per_sqft
        multiplier = self.rates.leg_type_multipliers.get(building.leg_type.value, ZERO)
        return to_cents(frame * multiplier)

    def _calculate_accessories_total(self, building: BuildingConfig,
                                     accessories: AccessoriesConfig) -> Decimal:
        """Doors + windows + insulation + ventilation + gutters."""
        total = self._calculate_door_cost(accessories)
        total += self._calculate_window_cost(accessories)
        total += self.rates.insulation_prices.get(accessories.insulation.value, ZERO)
        if accessories.ventilation:
            total += self.rates.ventilation_price
        if accessories.gutters:
            # Perimeter stands in for the gutter run
            total += building.perimeter_ft * self.rates.gutters_per_linear_ft
        return to_cents(total)

    def _calculate_door_cost(self, accessories: AccessoriesConfig) -> Decimal:
        """
        Unit price by door type and size × quantity.
        A size sold only for the other door type is in the table at zero;
        a size missing from the table also prices at zero.
        """
        total = ZERO
        for door in accessories.doors.values():
            table = self.rates.door_prices.get(door.type.value, {})
            unit = table.get(door.size, ZERO)
            if not unit:
                logger.debug(f"No price for {door.type.value} door {door.size!r}")
                continue
            total += unit * door.quantity
        return total

    def _calculate_window_cost(self, accessories: AccessoriesConfig) -> Decimal:
        return sum(
            (self.rates.window_prices.get(w.size.value, ZERO) * w.quantity
             for w in accessories.windows.values()),
            ZERO,
        )

    def _calculate_concrete_total(self, building: BuildingConfig,
                                  concrete: ConcreteConfig) -> Decimal:
        """
        none → 0
        piers → pier price × one pier per frame leg (thickness does not apply)
        slab / turnkey → sqft × rate × thickness multiplier
        """
        if concrete.type == ConcreteType.NONE:
            return to_cents(ZERO)

        rate = self.rates.concrete_prices.get(concrete.type.value, ZERO)

        if concrete.type == ConcreteType.PIERS:
            return to_cents(rate * self.pier_count(building))

        thickness_multiplier = self.rates.concrete_thickness_multipliers.get(
            concrete.thickness, ZERO,
        )
        return to_cents(building.square_feet * rate * thickness_multiplier)

    def pier_count(self, building: BuildingConfig) -> int:
        """Legs down both long sides at the standard spacing, corners included."""
        legs_per_side = math.ceil(building.length / self.rates.leg_spacing_ft) + 1
        return 2 * legs_per_side

    def _calculate_labor_total(self, building: BuildingConfig) -> Decimal:
        return to_cents(building.square_feet * self.rates.labor_per_sqft)

    def _calculate_delivery_total(self, distance_miles) -> Decimal:
        """Flat trip fee + per-mile rate."""
        miles = Decimal(str(distance_miles))
        return to_cents(self.rates.delivery_base + self.rates.delivery_per_mile * miles)
