from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ...api.deps import get_settings_dep
from ...core.config import Settings

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    environment: str
    integrations: dict[str, bool] = Field(default_factory=dict)


@router.get("/health", response_model=HealthResponse)
async def health(settings: Settings = Depends(get_settings_dep)) -> HealthResponse:
    # Flags only say whether credentials are present, never their values
    return HealthResponse(
        status="ok",
        environment=settings.ENV,
        integrations=settings.integrations_status(),
    )
