"""Inbound message contracts.

Payloads are checked against these models before any state transition.
Unknown extra fields are ignored; a payload that fails validation raises
``pydantic.ValidationError`` and the socket handler drops it.
"""

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


class JoinPayload(BaseModel):
    model_config = ConfigDict(extra='ignore')

    name: StrictStr = Field(min_length=1)


class PressPayload(BaseModel):
    # Range is checked by the game state, not here: out-of-board presses are
    # a rejected transition rather than a malformed message.
    model_config = ConfigDict(extra='ignore')

    x: StrictInt
    y: StrictInt
