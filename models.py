import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional


class InvalidInput(ValueError):
    """Raised when biometric input cannot be used for a calculation."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ActivityLevel(str, Enum):
    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "veryActive"


class Goal(str, Enum):
    WEIGHT_LOSS = "Weight Loss"
    MAINTAIN = "Maintain"
    BULK = "Bulk"


class Intensity(str, Enum):
    MODERATE = "moderate"
    INTENSE = "intense"


def parse_enum(enum_cls, value: Any, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidInput(field, f"{value!r} is not one of: {allowed}") from None


def _positive_number(value: Any, field: str) -> float:
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput(field, f"expected a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise InvalidInput(field, f"must be a positive number, got {value!r}")
    return value


@dataclass(frozen=True)
class BiometricInput:
    gender: Gender
    age: float                 # years
    height_cm: float
    weight_kg: float
    activity_level: ActivityLevel

    def __post_init__(self):
        # frozen: coerce through object.__setattr__
        object.__setattr__(self, "gender", parse_enum(Gender, self.gender, "gender"))
        object.__setattr__(
            self,
            "activity_level",
            parse_enum(ActivityLevel, self.activity_level, "activityLevel"),
        )
        object.__setattr__(self, "age", _positive_number(self.age, "age"))
        object.__setattr__(self, "height_cm", _positive_number(self.height_cm, "height"))
        object.__setattr__(self, "weight_kg", _positive_number(self.weight_kg, "weight"))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BiometricInput":
        """
        Build from the wire shape:
          {gender, age, height (cm), weight (kg), activityLevel}
        """
        if not isinstance(data, Mapping):
            raise InvalidInput("input", f"expected an object, got {type(data).__name__}")

        missing = [
            key
            for key in ("gender", "age", "height", "weight", "activityLevel")
            if data.get(key) is None
        ]
        if missing:
            raise InvalidInput(missing[0], "is required")

        return cls(
            gender=data["gender"],
            age=data["age"],
            height_cm=data["height"],
            weight_kg=data["weight"],
            activity_level=data["activityLevel"],
        )


@dataclass(frozen=True)
class MacroPlan:
    calories: int
    protein: int   # grams
    carbs: int     # grams
    fats: int      # grams

    @property
    def macro_calories(self) -> int:
        """Calories implied by the rounded grams; may drift from `calories`."""
        return self.protein * 4 + self.carbs * 4 + self.fats * 9

    def as_dict(self) -> dict:
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
        }


@dataclass(frozen=True)
class GoalOptions:
    moderate: MacroPlan
    intense: MacroPlan

    def for_intensity(self, intensity: Intensity) -> MacroPlan:
        if intensity is Intensity.INTENSE:
            return self.intense
        return self.moderate

    def as_dict(self) -> dict:
        return {
            "moderate": self.moderate.as_dict(),
            "intense": self.intense.as_dict(),
        }


@dataclass(frozen=True)
class CalculationResult:
    recommended_goal: Goal
    maintenance: MacroPlan
    weight_loss: GoalOptions
    bulk: GoalOptions

    bmr: float
    tdee: int
    bmi: float

    def as_dict(self) -> dict:
        return {
            "recommendedGoal": self.recommended_goal.value,
            "maintenance": self.maintenance.as_dict(),
            "weightLoss": self.weight_loss.as_dict(),
            "bulk": self.bulk.as_dict(),
            "bmr": self.bmr,
            "tdee": self.tdee,
            "bmi": round(self.bmi, 1),
        }


@dataclass(frozen=True)
class NutritionTargets:
    goal: Goal
    intensity: Optional[Intensity]   # None when maintaining
    target_calories: int
    target_protein: int
    target_carbs: int
    target_fats: int

    def as_dict(self) -> dict:
        return {
            "goal": self.goal.value,
            "intensity": self.intensity.value if self.intensity else None,
            "target_calories": self.target_calories,
            "target_protein": self.target_protein,
            "target_carbs": self.target_carbs,
            "target_fats": self.target_fats,
        }
