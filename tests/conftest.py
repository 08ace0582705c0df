"""
SchoolDesk API - Test Configuration and Fixtures
"""
import os
from datetime import datetime, timezone
from typing import AsyncGenerator, Callable, List, Optional, Union
from unittest.mock import AsyncMock, MagicMock
import httpx
import pytest
from httpx import AsyncClient, ASGITransport
from faker import Faker

# Set testing environment
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['ENVIRONMENT'] = 'testing'
os.environ['OTP_STORE_BACKEND'] = 'memory'
os.environ['EGOSMS_USERNAME'] = 'test-sms-user'
os.environ['EGOSMS_PASSWORD'] = 'test-sms-pass'
os.environ['BACKEND_API_URL'] = 'http://backend.test'
os.environ['LOG_LEVEL'] = 'DEBUG'

from app.main import app
from app.core.config import Settings, settings as app_settings
from app.core.dependencies import AppServices, build_otp_services
from app.services.backend_client import BackendClient
from app.services.otp_services.otp_store import InMemoryOtpStore
from app.services.sms_services.delivery_store import InMemoryDeliveryStore
from app.services.sms_services.egosms_gateway import EgoSmsConfig, EgoSmsGateway
from app.utils.imagekit_uploader import ImageKitUploader
from app.utils.security import create_access_token
from app.utils.send_email import EmailGateway

fake = Faker()

Reply = Union[httpx.Response, Exception]


class RecordingHandler:
    """httpx.MockTransport handler that records requests and replays queued replies."""

    def __init__(self, default: Callable[[httpx.Request], httpx.Response]):
        self.default = default
        self.requests: List[httpx.Request] = []
        self.replies: List[Reply] = []

    def queue(self, reply: Reply) -> None:
        self.replies.append(reply)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.pop(0) if self.replies else self.default(request)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def last_request(self) -> Optional[httpx.Request]:
        return self.requests[-1] if self.requests else None


def egosms_ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={
        "Status": "OK",
        "Message": "API Message Sent",
        "MsgFollowUpUniqueCode": f"ApiJsonSubmit{fake.uuid4()}",
    })


def backend_ok(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/api/v1/integration/user":
        return httpx.Response(200, json={
            "status": {"returnCode": "00", "returnMessage": "User found"},
            "user": {"id": 42}
        })
    if request.url.path == "/api/v1/auth/update-password":
        return httpx.Response(200, json={
            "status": {"returnCode": "00", "returnMessage": "Password updated"}
        })
    return httpx.Response(404, json={"status": {"returnCode": "99", "returnMessage": "Not found"}})


@pytest.fixture
def settings() -> Settings:
    return app_settings


@pytest.fixture
def sms_handler() -> RecordingHandler:
    return RecordingHandler(egosms_ok)


@pytest.fixture
def backend_handler() -> RecordingHandler:
    return RecordingHandler(backend_ok)


@pytest.fixture
def sms_gateway(settings: Settings, sms_handler: RecordingHandler) -> EgoSmsGateway:
    return EgoSmsGateway(
        EgoSmsConfig.from_settings(settings),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(sms_handler)),
    )


@pytest.fixture
def mailer() -> MagicMock:
    mailer = MagicMock()
    mailer.send_message = AsyncMock(return_value=None)
    return mailer


@pytest.fixture
def uploader() -> MagicMock:
    uploader = MagicMock(spec=ImageKitUploader)
    uploader.upload_image = AsyncMock(return_value={
        "url": "https://ik.imagekit.io/schooldesk/staff-photos/staff_1.png",
        "fileId": "file_123"
    })
    uploader.public_url.side_effect = lambda folder, name: f"https://ik.imagekit.io/schooldesk/{folder}/{name}"
    return uploader


@pytest.fixture
def services(settings, sms_gateway, backend_handler, mailer, uploader) -> AppServices:
    otp_store = InMemoryOtpStore()
    issuer, verifier = build_otp_services(settings, otp_store)
    return AppServices(
        settings=settings,
        otp_store=otp_store,
        issuer=issuer,
        verifier=verifier,
        sms_gateway=sms_gateway,
        delivery_store=InMemoryDeliveryStore(),
        backend=BackendClient(httpx.AsyncClient(
            base_url=settings.BACKEND_API_URL,
            transport=httpx.MockTransport(backend_handler),
        )),
        email_gateway=EmailGateway(conf=None, mailer=mailer),
        uploader=uploader,
    )


@pytest.fixture
async def client(services: AppServices) -> AsyncGenerator[AsyncClient, None]:
    """Test client wired to in-memory stores and mocked transports"""
    app.state.services = services

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    await services.aclose()


@pytest.fixture
def auth_headers(settings: Settings) -> dict:
    """Generate authentication headers for a dashboard user"""
    token = create_access_token({'sub': fake.email(), 'role': 'admin'}, settings)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc)
