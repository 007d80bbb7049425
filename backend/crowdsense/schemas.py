from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, AliasChoices, ConfigDict

class UplinkIn(BaseModel):
    bytes: list[int] = Field(default_factory=list)
    frm_payload: Optional[str] = Field(default=None, validation_alias=AliasChoices("frm_payload", "payload"))
    hex: Optional[str] = None
    fPort: Optional[int] = None
    recvTime: Optional[str] = None
    model_config = ConfigDict(extra="ignore")


class DecodedReadingOut(BaseModel):
    ble_count: int
    wifi_count: int
    total_count: int
    crowd_level: int
    crowd_level_text: str
    beacon_detected: bool
    beacon_rssi: int
    environment_type: int
    environment_text: str
    model_config = ConfigDict(from_attributes=True)

class UplinkOut(BaseModel):
    data: DecodedReadingOut
    warnings: list[str] = Field(default_factory=list)

class RawUplinkOut(UplinkOut):
    sensor_id: Optional[str] = None
    ts: Optional[datetime] = None
