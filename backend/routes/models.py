"""Pydantic request models for API endpoints."""

from typing import Any

from pydantic import BaseModel


class Credentials(BaseModel):
    email: str
    password: str


class AskBody(BaseModel):
    # Validated by hand so bad input maps to 400 rather than 422.
    question: Any = None
