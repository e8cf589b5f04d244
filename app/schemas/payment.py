from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Package(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: int  # cents
    credits: int


class PackageListResponse(BaseModel):
    packages: Dict[str, Package]


class CreateCheckoutSessionRequest(BaseModel):
    packageType: Optional[str] = None
    origin: Optional[str] = None


class CreateCheckoutSessionResponse(BaseModel):
    url: str


class SessionStatusResponse(BaseModel):
    status: Optional[str] = None
    customer_email: Optional[str] = None
    amount_total: Optional[int] = None


class WebhookAck(BaseModel):
    received: bool = True


class HealthResponse(BaseModel):
    status: str
    message: str
    endpoints: List[str] = Field(default_factory=list)
