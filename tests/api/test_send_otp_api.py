"""
Standalone email / phone verification OTP endpoint
"""
import json
import httpx
import pytest

URL = "/api/v1/auth/send-otp"
PHONE = "256772611854"


class TestSendOtp:

    async def test_phone(self, client, services, sms_handler, backend_handler):
        response = await client.post(URL, json={"type": "phone", "phone": PHONE})

        assert response.status_code == 200
        assert response.json() == {"status": "success", "message": "OTP sent successfully"}
        record = await services.otp_store.get(PHONE)
        assert (record.expires_at - record.created_at).total_seconds() == 600
        assert record.user_id is None
        message = json.loads(sms_handler.last_request.content)["msgdata"][0]["message"]
        assert message == f"Your verification code is: {record.code}. This code expires in 10 minutes."
        assert backend_handler.requests == []

    async def test_email(self, client, services, mailer, sms_handler):
        response = await client.post(URL, json={"type": "email", "email": "Jane.Doe@School.ac.ug"})

        assert response.status_code == 200
        record = await services.otp_store.get("jane.doe@school.ac.ug")
        message = mailer.send_message.await_args.args[0]
        assert message.subject == "Your Verification Code"
        assert record.code in message.body
        assert sms_handler.requests == []

    async def test_otp_echoed_in_development(self, client, services, monkeypatch):
        monkeypatch.setattr(services.settings, "ENVIRONMENT", "development")

        response = await client.post(URL, json={"type": "phone", "phone": PHONE})

        assert response.json()["otp"] == (await services.otp_store.get(PHONE)).code

    async def test_code_accepted_by_verify_otp(self, client, services):
        await client.post(URL, json={"type": "phone", "phone": PHONE})
        code = (await services.otp_store.get(PHONE)).code

        response = await client.post("/api/v1/auth/verify-otp", json={"identifier": PHONE, "otp": code})

        assert response.json()["status"]["returnCode"] == "00"

    @pytest.mark.parametrize("body, message", [
        ({"type": "fax"}, 'Invalid OTP type. Must be "email" or "phone"'),
        ({}, 'Invalid OTP type. Must be "email" or "phone"'),
        ({"type": "email"}, "Email is required for email OTP"),
        ({"type": "email", "email": "jane@school"}, "Please enter a valid email address"),
        ({"type": "phone"}, "Phone number is required for phone OTP"),
        ({"type": "phone", "phone": "0772611854"},
         "Please enter a valid phone number starting with 256 (e.g., 2567XXXXXXXX)"),
        ({"type": "phone", "phone": "256٧٧٢٦١١٨٥٤"},
         "Please enter a valid phone number starting with 256 (e.g., 2567XXXXXXXX)"),
    ])
    async def test_validation(self, client, services, sms_handler, body, message):
        response = await client.post(URL, json=body)

        assert response.status_code == 400
        assert response.json() == {"status": "error", "message": message}
        assert sms_handler.requests == []

    async def test_email_not_configured(self, client, services):
        services.email_gateway = None

        response = await client.post(URL, json={"type": "email", "email": "jane@school.ac.ug"})

        assert response.status_code == 501
        assert response.json()["status"] == "error"

    async def test_delivery_failure(self, client, sms_handler):
        sms_handler.queue(httpx.ConnectError("down"))

        response = await client.post(URL, json={"type": "phone", "phone": PHONE})

        assert response.status_code == 500
        assert response.json() == {"status": "error", "message": "Failed to send OTP"}
