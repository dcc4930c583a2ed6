"""Schemas for profile requests"""

from typing import List, Optional

from domain.schemas.entity_schemas import CamelModel


class ProfileUpdate(CamelModel):
    """Fields left out are not changed"""

    username: Optional[str] = None
    avatar_url: Optional[str] = None
    cuisines: Optional[List[str]] = None
