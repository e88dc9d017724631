from typing import Optional

from pydantic import BaseModel, field_validator

from ._utils.constants import DEFAULT_TIMEOUT


class Config(BaseModel):
    base_url: str
    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: Optional[bool] = None

    @field_validator("base_url")
    @classmethod
    def _base_url_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("base_url must not be empty")
        return value
