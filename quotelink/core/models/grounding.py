"""Structured generator payloads."""
from typing import Any

from pydantic import BaseModel, field_validator


class GroundedAnswer(BaseModel):
    """Answer to a document question with its supporting quote.

    The quote is either empty or, by contract with the producer, a verbatim
    substring of the document text. The contract is advisory: a quote that
    cannot be found simply grounds nowhere.
    """

    answer: str
    quote: str = ""

    @field_validator("quote", mode="before")
    @classmethod
    def coerce_missing_quote(cls, v: Any) -> Any:
        return "" if v is None else v
