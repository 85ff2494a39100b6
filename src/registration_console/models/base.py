from pydantic import BaseModel, ConfigDict


class ModelBase(BaseModel):
    """
    Base class for all registration-console models.

    Enforces strict validation, forbids unknown fields, and accepts both the
    camelCase wire names and the snake_case attribute names on input.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        populate_by_name=True,
        frozen=False,
    )


UserId = str
QueryKey = tuple[str, ...]
