from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt

from models import ActivityLevel, BiometricInput, Gender, Goal, Intensity

# JSON numbers only; "25" is not an age
Number = Union[StrictInt, StrictFloat]


class BiometricsRequest(BaseModel):
    gender: Gender
    age: Number = Field(..., description="years")
    height: Number = Field(..., description="cm")
    weight: Number = Field(..., description="kg")
    activity_level: ActivityLevel = Field(..., alias="activityLevel")

    model_config = ConfigDict(populate_by_name=True)

    def to_biometrics(self) -> BiometricInput:
        """Positivity and range checks happen here, as InvalidInput."""
        return BiometricInput(
            gender=self.gender,
            age=self.age,
            height_cm=self.height,
            weight_kg=self.weight,
            activity_level=self.activity_level,
        )


class TargetsRequest(BiometricsRequest):
    goal: Optional[Goal] = Field(None, description="defaults to the recommended goal")
    intensity: Optional[Intensity] = None
