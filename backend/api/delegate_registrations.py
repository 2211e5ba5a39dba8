from fastapi import APIRouter, Depends

from core.config import Settings, get_settings
from integrations.supabase import SupabaseClient, get_supabase_client
from schemas import DelegateRegistrationCreate, DelegateRegistrationResponse
from services import RegistrationService

router = APIRouter()


@router.post("", response_model=DelegateRegistrationResponse)
async def create_registration(
    data: DelegateRegistrationCreate,
    client: SupabaseClient = Depends(get_supabase_client),
    settings: Settings = Depends(get_settings),
):
    service = RegistrationService(client, settings)
    registration_id = await service.register(data)
    return DelegateRegistrationResponse(id=registration_id)
