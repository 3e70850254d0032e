from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]
DayName = Annotated[str, StringConstraints(min_length=1)]

PositiveNumber = Annotated[float, Field(gt=0, strict=True, allow_inf_nan=False)]
NonNegativeNumber = Annotated[float, Field(ge=0, strict=True, allow_inf_nan=False)]
PositiveInt = Annotated[int, Field(gt=0, strict=True)]


class PlanModel(BaseModel):
    """Base for plan documents: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    def to_document(self) -> dict[str, Any]:
        """Serialize back to the wire shape the plan was parsed from."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class MacroTotals(PlanModel):
    calories: PositiveNumber
    protein: NonNegativeNumber
    carbs: NonNegativeNumber
    fat: NonNegativeNumber
