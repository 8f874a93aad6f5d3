"""Authentication token model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AuthToken(BaseModel):
    """Bearer token returned by the login endpoint.

    Parameters
    ----------
    token : str
        The raw JWT, sent as ``Authorization: Bearer`` and as the feed's
        ``jwt`` query parameter.
    user_id : str
        User id read from the token payload (not signature-verified).
    """

    model_config = ConfigDict(frozen=True)

    token: str = Field(repr=False)
    user_id: str
