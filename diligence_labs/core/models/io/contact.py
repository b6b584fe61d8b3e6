"""Contact form I/O models."""

from typing import Optional

from pydantic import EmailStr, Field

from .base import CamelModel


class ContactRequest(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    message: str = Field(min_length=1, max_length=5000)
    subject: Optional[str] = Field(default=None, max_length=200)
