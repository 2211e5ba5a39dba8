import logging
import re
from typing import Any, Optional

import httpx

from core.config import Settings
from core.exceptions import APIError, BadRequestError, ConfigError
from integrations.supabase import SupabaseClient
from schemas import DelegateRegistrationCreate

logger = logging.getLogger(__name__)

REGISTRATIONS_TABLE = "delegate_registrations"
EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


class RegistrationService:
    def __init__(self, client: SupabaseClient, settings: Settings):
        self.client = client
        self.settings = settings

    async def register(self, data: DelegateRegistrationCreate) -> Any:
        """대표단 등록. 삽입된 행의 id 반환."""
        if not self.settings.has_service_credentials:
            raise ConfigError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required.")

        first_name = _clean(data.first_name)
        last_name = _clean(data.last_name)
        email = (_clean(data.email) or "").lower()
        delegation_type = _clean(data.delegation_type)

        if not first_name or not last_name or not email or not delegation_type:
            raise BadRequestError(
                "first_name, last_name, email, and delegation_type are required."
            )

        if not EMAIL_REGEX.match(email):
            raise BadRequestError("Please provide a valid email address.")

        row = {
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "delegation_type": delegation_type,
            "preferred_country": _clean(data.preferred_country),
            "preferred_institution": _clean(data.preferred_institution),
            "committee_preference": _clean(data.committee_preference),
        }

        try:
            inserted = await self.client.insert_row(REGISTRATIONS_TABLE, row)
        except httpx.HTTPStatusError as e:
            status = 409 if e.response.status_code == 409 else 500
            raise APIError(status, e.response.text)
        except httpx.RequestError as e:
            raise APIError(500, str(e) or "Registration failed.")

        record = inserted[0] if inserted else {}
        logger.info(f"Delegate registered: {email} ({delegation_type})")
        return record.get("id")
