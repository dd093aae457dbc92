from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class NetworkSchema(BaseModel):
    """A visible access point as rendered for the portal UI."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    ssid: str
    signal_strength: int = Field(alias="signalStrength")
    security: str


NETWORK_LIST = TypeAdapter(list[NetworkSchema])
