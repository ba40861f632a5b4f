from fastapi import APIRouter, Depends

from docextract.api.dependencies import get_caller, get_services
from docextract.api.schemas import UserSettingsRequest, UserSettingsResponse
from docextract.container import Services
from docextract.processor.models import Caller

router = APIRouter(prefix="/user-settings", tags=["user-settings"])


@router.get("", response_model=UserSettingsResponse)
def read_user_settings(
    caller: Caller = Depends(get_caller),
    services: Services = Depends(get_services),
) -> UserSettingsResponse:
    view = services.user_settings.get(caller)
    return UserSettingsResponse(
        notion_api_key=view.notion_api_key,
        default_source_id=view.default_source_id,
    )


@router.post("")
def save_user_settings(
    body: UserSettingsRequest,
    caller: Caller = Depends(get_caller),
    services: Services = Depends(get_services),
) -> dict[str, bool]:
    services.user_settings.save(caller, body.notion_api_key, body.default_source_id)
    return {"success": True}
