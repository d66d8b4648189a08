from pydantic import BaseModel, Field


class VendorStatusRequest(BaseModel):
    status: str = Field(..., min_length=1)
