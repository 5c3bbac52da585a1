"""
Datacenter and Profile Schemas.

Read-only views over the datacenter directory and account profiles used by
the listing commands.
"""

from pydantic import BaseModel, Field


class Datacenter(BaseModel):
    """One entry of the datacenter directory."""

    name: str = Field(description="Datacenter id")
    url: str = Field(description="CloudAPI endpoint")


class ProfileView(BaseModel):
    """One profile row, as shown by `sdc profile`."""

    curr: str = Field(description="'*' for the active profile")
    name: str
    dcs: str = Field(description="Comma-joined datacenters, or 'all'")
    user: str
    key_id: str
