"""
User Profile Model

The profile is sent to the chat backend alongside the accounts so the
assistant can take residency and filing status into account.
"""

from pydantic import BaseModel, ConfigDict, Field


class UserDetails(BaseModel):
    """Profile of the single dashboard user."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: str = Field(..., min_length=1, description="Name is required")
    age: int = Field(..., ge=0, description="Age in years")
    state: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    citizen_of: str = Field(..., min_length=1)
    tax_filing_status: str = Field(..., min_length=1)
    is_tax_resident: bool = False
