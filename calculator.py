import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from models import (
    ActivityLevel,
    BiometricInput,
    CalculationResult,
    Gender,
    Goal,
    GoalOptions,
    Intensity,
    InvalidInput,
    MacroPlan,
    NutritionTargets,
    parse_enum,
)

logger = logging.getLogger(__name__)


ACTIVITY_MAP = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}

BMI_UNDERWEIGHT = 18.5
BMI_OVERWEIGHT = 25.0

# g/kg of body weight
MIN_PROTEIN_PER_KG = {
    Goal.WEIGHT_LOSS: 2.0,
    Goal.BULK: 2.0,
    Goal.MAINTAIN: 1.6,
}


@dataclass(frozen=True)
class MacroSplit:
    calorie_delta: int
    protein_ratio: float
    carbs_ratio: float
    fats_ratio: float


MAINTENANCE_SPLIT = MacroSplit(0, 0.30, 0.40, 0.30)

GOAL_SPLITS = {
    (Goal.WEIGHT_LOSS, Intensity.MODERATE): MacroSplit(-500, 0.35, 0.35, 0.30),
    (Goal.WEIGHT_LOSS, Intensity.INTENSE): MacroSplit(-750, 0.40, 0.30, 0.30),
    (Goal.BULK, Intensity.MODERATE): MacroSplit(300, 0.30, 0.45, 0.25),
    (Goal.BULK, Intensity.INTENSE): MacroSplit(500, 0.30, 0.50, 0.20),
}


def round_half_up(value: float) -> int:
    """Round .5 away from -inf (2.5 -> 3, -2.5 -> -2), unlike round()."""
    floored = math.floor(value)
    return int(floored + 1 if value - floored >= 0.5 else floored)


class NutritionCalculator:
    """
    Core logic:
    - Compute BMR (Mifflin-St Jeor)
    - Apply activity factor -> TDEE
    - Recommend a goal from BMI
    - Derive maintenance, weight-loss and bulk macro plans,
      each with a body-weight protein floor
    """

    def _bmr(self, data: BiometricInput) -> float:
        val = 10 * data.weight_kg + 6.25 * data.height_cm - 5 * data.age
        if data.gender is Gender.MALE:
            return val + 5
        # female and other share the same branch
        return val - 161

    def _tdee(self, bmr: float, activity_level: ActivityLevel) -> int:
        try:
            factor = ACTIVITY_MAP[activity_level]
        except KeyError:
            raise InvalidInput("activityLevel", f"unknown activity level {activity_level!r}") from None
        energy = bmr * factor
        if not math.isfinite(energy):
            raise InvalidInput("input", "values are too large to calculate with")
        return round_half_up(energy)

    def _bmi(self, data: BiometricInput) -> float:
        height_m = data.height_cm / 100
        area = height_m * height_m
        # tiny heights underflow to 0.0 when squared
        if area == 0 or not math.isfinite(data.weight_kg / area):
            raise InvalidInput("height", "too small for the given weight")
        return data.weight_kg / area

    def _recommended_goal(self, bmi: float) -> Goal:
        if bmi < BMI_UNDERWEIGHT:
            return Goal.BULK
        if bmi >= BMI_OVERWEIGHT:
            return Goal.WEIGHT_LOSS
        return Goal.MAINTAIN

    def _derive_macros(
        self, calories: int, split: MacroSplit, weight_kg: float, goal: Goal
    ) -> MacroPlan:
        """
        Protein first (ratio or body-weight floor, whichever is higher),
        then the remaining calories are split between carbs and fats in
        proportion to their ratios. `calories` is returned untouched, so the
        rounded grams may not add back up to it exactly.
        """
        protein = round_half_up(calories * split.protein_ratio / 4)
        min_protein = round_half_up(weight_kg * MIN_PROTEIN_PER_KG[goal])
        protein = max(protein, min_protein)

        # protein floor can eat the whole budget on very low targets
        remaining = max(calories - protein * 4, 0)

        carbs_share = split.carbs_ratio / (split.carbs_ratio + split.fats_ratio)
        carbs = round_half_up(remaining * carbs_share / 4)
        fats = round_half_up(remaining * (1 - carbs_share) / 9)

        return MacroPlan(calories=calories, protein=protein, carbs=carbs, fats=fats)

    def _goal_options(self, goal: Goal, tdee: int, weight_kg: float) -> GoalOptions:
        plans = {}
        for intensity in Intensity:
            split = GOAL_SPLITS[(goal, intensity)]
            plans[intensity.value] = self._derive_macros(
                tdee + split.calorie_delta, split, weight_kg, goal
            )
        return GoalOptions(**plans)

    def calculate(self, data: Union[BiometricInput, Mapping[str, Any]]) -> CalculationResult:
        if not isinstance(data, BiometricInput):
            data = BiometricInput.from_dict(data)

        bmr = self._bmr(data)
        tdee = self._tdee(bmr, data.activity_level)
        bmi = self._bmi(data)
        recommended = self._recommended_goal(bmi)

        logger.debug(
            "bmr=%.2f tdee=%d bmi=%.2f recommended=%s",
            bmr, tdee, bmi, recommended.value,
        )

        maintenance = self._derive_macros(tdee, MAINTENANCE_SPLIT, data.weight_kg, Goal.MAINTAIN)

        return CalculationResult(
            recommended_goal=recommended,
            maintenance=maintenance,
            weight_loss=self._goal_options(Goal.WEIGHT_LOSS, tdee, data.weight_kg),
            bulk=self._goal_options(Goal.BULK, tdee, data.weight_kg),
            bmr=bmr,
            tdee=tdee,
            bmi=bmi,
        )


def select_plan(
    result: CalculationResult,
    goal: Union[Goal, str],
    intensity: Union[Intensity, str] = Intensity.MODERATE,
) -> MacroPlan:
    """Pick one plan out of a result; intensity is ignored when maintaining."""
    goal = parse_enum(Goal, goal, "goal")
    intensity = parse_enum(Intensity, intensity, "intensity")

    if goal is Goal.MAINTAIN:
        return result.maintenance
    if goal is Goal.WEIGHT_LOSS:
        return result.weight_loss.for_intensity(intensity)
    return result.bulk.for_intensity(intensity)


def nutrition_targets(
    result: CalculationResult,
    goal: Optional[Union[Goal, str]] = None,
    intensity: Union[Intensity, str] = Intensity.MODERATE,
) -> NutritionTargets:
    """
    Returns the record a caller stores on the user's profile.
    `goal` defaults to the recommended goal.
    """
    goal = parse_enum(Goal, goal, "goal") if goal is not None else result.recommended_goal
    intensity = parse_enum(Intensity, intensity, "intensity")
    plan = select_plan(result, goal, intensity)

    return NutritionTargets(
        goal=goal,
        intensity=None if goal is Goal.MAINTAIN else intensity,
        target_calories=plan.calories,
        target_protein=plan.protein,
        target_carbs=plan.carbs,
        target_fats=plan.fats,
    )


_default_calculator = NutritionCalculator()


def calculate(data: Union[BiometricInput, Mapping[str, Any]]) -> CalculationResult:
    return _default_calculator.calculate(data)
