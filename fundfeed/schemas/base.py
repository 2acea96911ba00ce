"""Schema Base — camelCase wire names for every request and response model.

Invariants:
    - Wire format uses camelCase (companyName, followerCount, ...)
    - Python code uses snake_case; both names accepted on input
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """BaseModel with camelCase aliases, populated by either name."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
