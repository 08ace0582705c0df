"""
Phone-based password reset endpoints
"""
import json
import httpx
from app.schemas.sms_message import DeliveryStatus

URL = "/api/v1/auth/password-reset"
PHONE = "0772611854"
IDENTIFIER = "256772611854"


def sent_message(sms_handler) -> str:
    return json.loads(sms_handler.last_request.content)["msgdata"][0]["message"]


async def request_otp(client, services) -> str:
    response = await client.post(URL, json={"phoneNumber": PHONE, "username": "jdoe"})
    assert response.status_code == 200
    return (await services.otp_store.get(IDENTIFIER)).code


class TestRequestOtp:

    async def test_sends_otp(self, client, services, sms_handler):
        response = await client.post(URL, json={"phoneNumber": PHONE, "username": "jdoe"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "OTP sent successfully"}

        record = await services.otp_store.get(IDENTIFIER)
        assert record.attempts == 0
        assert record.verified is False
        message = sent_message(sms_handler)
        assert message.startswith("Hello jdoe, your password reset code is: ")
        assert record.code in message
        assert "Valid for 10 minutes" in message

    async def test_tracks_delivery(self, client, services, sms_handler):
        sms_handler.queue(httpx.Response(200, json={"Status": "OK", "MsgFollowUpUniqueCode": "msg-otp"}))

        await client.post(URL, json={"phoneNumber": PHONE})

        record = await services.delivery_store.get("msg-otp")
        assert record.status == DeliveryStatus.PENDING
        assert record.recipient == IDENTIFIER
        assert record.reference.startswith("OTP_")

    async def test_invalid_phone(self, client, services, sms_handler):
        for phone in ["12345", "not-a-phone", None, "٠٧٧٢٦١١٨٥٤", "0772611854\n"]:
            response = await client.post(URL, json={"phoneNumber": phone})

            assert response.status_code == 400
            assert response.json() == {"success": False, "message": "Invalid phone number"}
        assert sms_handler.requests == []

    async def test_transport_failure_keeps_otp(self, client, services, sms_handler):
        sms_handler.queue(httpx.ConnectError("down"))

        response = await client.post(URL, json={"phoneNumber": PHONE})

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Failed to send OTP"}
        assert await services.otp_store.get(IDENTIFIER) is not None


class TestConfirmReset:

    async def test_reset_succeeds(self, client, services, backend_handler):
        code = await request_otp(client, services)

        response = await client.put(URL, json={
            "phoneNumber": PHONE,
            "otpCode": code,
            "newPassword": "new-password-1"
        })

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Password reset successful"}
        update = backend_handler.last_request
        assert update.url.path == "/api/v1/auth/update-password"
        assert json.loads(update.content) == {"newPassword": "new-password-1", "phoneNumber": IDENTIFIER}
        assert await services.otp_store.get(IDENTIFIER) is None

    async def test_code_cannot_be_reused(self, client, services):
        code = await request_otp(client, services)
        body = {"phoneNumber": PHONE, "otpCode": code, "newPassword": "new-password-1"}

        assert (await client.put(URL, json=body)).status_code == 200
        response = await client.put(URL, json=body)

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid or expired OTP"

    async def test_missing_fields(self, client):
        response = await client.put(URL, json={"phoneNumber": PHONE, "otpCode": "123456"})

        assert response.status_code == 400
        assert response.json()["message"] == "Missing required fields"

    async def test_weak_password(self, client, services):
        code = await request_otp(client, services)

        response = await client.put(URL, json={"phoneNumber": PHONE, "otpCode": code, "newPassword": "short"})

        assert response.status_code == 400
        assert response.json()["message"] == "Password must be at least 8 characters long"
        # Rejected before verification, so no attempt is consumed
        assert (await services.otp_store.get(IDENTIFIER)).attempts == 0

    async def test_invalid_phone(self, client):
        response = await client.put(URL, json={"phoneNumber": "123", "otpCode": "123456", "newPassword": "long-enough"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid phone number"

    async def test_no_pending_otp(self, client, backend_handler):
        response = await client.put(URL, json={"phoneNumber": PHONE, "otpCode": "123456", "newPassword": "long-enough"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Invalid or expired OTP"}
        assert backend_handler.requests == []

    async def test_locked_after_max_attempts(self, client, services):
        code = await request_otp(client, services)
        wrong = "000000" if code != "000000" else "111111"
        body = {"phoneNumber": PHONE, "newPassword": "long-enough"}

        for _ in range(3):
            response = await client.put(URL, json={**body, "otpCode": wrong})
            assert response.status_code == 400

        response = await client.put(URL, json={**body, "otpCode": code})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid or expired OTP"

    async def test_backend_rejects_update(self, client, services, backend_handler):
        code = await request_otp(client, services)
        backend_handler.queue(httpx.Response(400, json={
            "status": {"returnCode": "08", "returnMessage": "User not found"}
        }))

        response = await client.put(URL, json={"phoneNumber": PHONE, "otpCode": code, "newPassword": "long-enough"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "User not found"}
        # Refusal leaves the code usable for another try
        assert (await services.otp_store.get(IDENTIFIER)).verified is False

    async def test_retry_after_backend_outage(self, client, services, backend_handler):
        code = await request_otp(client, services)
        backend_handler.queue(httpx.ConnectError("unreachable"))
        body = {"phoneNumber": PHONE, "otpCode": code, "newPassword": "long-enough"}

        response = await client.put(URL, json=body)

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Error resetting password"}
        assert (await services.otp_store.get(IDENTIFIER)).verified is False

        retry = await client.put(URL, json=body)

        assert retry.status_code == 200
        assert retry.json() == {"success": True, "message": "Password reset successful"}
        assert await services.otp_store.get(IDENTIFIER) is None

    async def test_retry_after_backend_refusal(self, client, services, backend_handler):
        code = await request_otp(client, services)
        backend_handler.queue(httpx.Response(400, json={
            "status": {"returnCode": "08", "returnMessage": "User not found"}
        }))
        body = {"phoneNumber": PHONE, "otpCode": code, "newPassword": "long-enough"}

        assert (await client.put(URL, json=body)).status_code == 400
        retry = await client.put(URL, json=body)

        assert retry.status_code == 200
        assert len(backend_handler.requests) == 2

    async def test_non_ascii_otp_spends_no_attempt(self, client, services, backend_handler):
        await request_otp(client, services)

        for otp in ["١٢٣٤٥٦", "123456\n"]:
            response = await client.put(URL, json={"phoneNumber": PHONE, "otpCode": otp, "newPassword": "long-enough"})

            assert response.status_code == 400
            assert response.json() == {"success": False, "message": "Invalid or expired OTP"}
        assert (await services.otp_store.get(IDENTIFIER)).attempts == 0
        assert backend_handler.requests == []
