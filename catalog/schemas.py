from pydantic import BaseModel, ConfigDict, Field


# Largest id the BIGINT primary key of the services table can hold.
MAX_SERVICE_ID = 2**63 - 1


# --- Service ---

class Service(BaseModel):
    id: int = Field(ge=0, le=MAX_SERVICE_ID)
    name: str = Field(min_length=1)
    description: str
    versions: int = Field(ge=0)
    model_config = ConfigDict(from_attributes=True, frozen=True)


# --- Health ---

class HealthResponse(BaseModel):
    status: str
    version: str
    backend: str


# --- Metrics ---

class MetricsResponse(BaseModel):
    total_requests: int
    server_faults: int
    status_counts: dict[str, int] = {}
    avg_response_time_ms: float
    cache_info: dict = {}
