"""
Officer identity model (demo login only, not real authentication)
"""

from pydantic import BaseModel, Field
from typing import Literal
from uuid import uuid4


class Officer(BaseModel):
    """Signed-in officer"""
    id: str = Field(default_factory=lambda: uuid4().hex[:9])
    name: str
    badge_number: str
    email: str
    role: Literal['Officer', 'Admin'] = 'Officer'

    @property
    def first_name(self) -> str:
        return self.name.split(' ')[0] if self.name else ""
