import logging
from typing import Optional, Tuple
import httpx
from pydantic import BaseModel
from app.core.exceptions import BackendError
from app.utils.phone import is_email

logger = logging.getLogger(__name__)

SUCCESS_RETURN_CODES = ("00", 0)


class UserLookup(BaseModel):
    exists: bool
    user_id: Optional[str] = None


def _return_code(data: dict):
    status = data.get("status")
    return status.get("returnCode") if isinstance(status, dict) else None


class BackendClient:
    """Client for the school's business REST API."""

    def __init__(self, http_client: httpx.AsyncClient):
        self.http_client = http_client

    async def aclose(self) -> None:
        await self.http_client.aclose()

    async def verify_user(self, identifier: str) -> UserLookup:
        field = "email" if is_email(identifier) else "phoneNumber"
        try:
            response = await self.http_client.post(
                "/api/v1/integration/user",
                json={field: identifier},
                headers={"Accept": "application/json"},
            )
            data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"User verification request failed: {e}")
            raise BackendError("Error verifying user information. Please try again later.")
        except ValueError:
            logger.error(f"User verification returned a non-JSON body: {response.text}")
            raise BackendError("Error verifying user - Invalid response format")

        if not isinstance(data, dict):
            raise BackendError("Error verifying user - Invalid response format")

        nested = data.get("data")
        user = data.get("user") or (nested.get("user") if isinstance(nested, dict) else None)
        exists = response.is_success and _return_code(data) in SUCCESS_RETURN_CODES and bool(user)
        if not exists:
            return UserLookup(exists=False)

        user_id = user.get("id") if isinstance(user, dict) else None
        return UserLookup(exists=True, user_id=str(user_id) if user_id is not None else None)

    async def update_password(self, new_password: str, user_id: Optional[str] = None,
                              phone_number: Optional[str] = None) -> Tuple[bool, str]:
        body = {"newPassword": new_password}
        if user_id:
            body["userId"] = user_id
        if phone_number:
            body["phoneNumber"] = phone_number

        try:
            response = await self.http_client.post("/api/v1/auth/update-password", json=body)
            data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Password update request failed: {e}")
            raise BackendError("Error resetting password")
        except ValueError:
            raise BackendError("Error resetting password - Invalid response format")

        if not isinstance(data, dict):
            raise BackendError("Error resetting password - Invalid response format")

        if not response.is_success or _return_code(data) != "00":
            status = data.get("status")
            message = data.get("message") or (status.get("returnMessage") if isinstance(status, dict) else None)
            return False, message or "Failed to reset password"

        return True, "Password reset successful"
