"""
Shared helpers for the API models
"""
from pydantic import ConfigDict


def snake_to_camel(snake_str: str) -> str:
    """Convert snake_case to camelCase"""
    first, *rest = snake_str.split("_")
    return first + "".join(x.title() for x in rest)


# Wire format is camelCase (maxGuests, extraInfo); snake_case input is still accepted
camel_config = ConfigDict(
    alias_generator=snake_to_camel,
    populate_by_name=True,
    extra="ignore",
)
