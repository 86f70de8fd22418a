"""Base class for argument, state and object types."""

from pydantic import BaseModel, ConfigDict


class Schema(BaseModel):
    """Base class for types whose fields are published in the schema.

    Fields may be typed with wrapper and resource classes; pydantic only
    checks those with ``isinstance``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)
