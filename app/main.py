import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api.v1.routes import auth_router, webhook_router, sms_router, upload_router, system_router
from app.core.config import settings
from app.core.dependencies import build_services
from app.core.exceptions import register_exception_handlers
from app.middleware.auth_middleware import AuthMiddleware

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

API = settings.API_V1_STR

# Routes that do NOT require authentication
WHITELIST = [
    "/",
    "/docs",
    "/redoc",
    "/openapi.json",
    f"{API}/system/health",
]

PUBLIC_PREFIXES = [
    f"{API}/auth/",
    f"{API}/webhooks/",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    print("🔌 Building services...")
    app.state.services = await build_services(settings)
    print(f"📦 OTP store backend: {settings.OTP_STORE_BACKEND}")

    yield  # Application runs here

    print("🧹 Closing service connections...")
    await app.state.services.aclose()


# Initialize FastAPI app with lifespan
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Password reset, SMS and upload API for the school dashboard",
    version="1.0.0",
    lifespan=lifespan
)

register_exception_handlers(app)

# Add Auth middleware (token validation)
app.add_middleware(AuthMiddleware, whitelist=WHITELIST, public_prefixes=PUBLIC_PREFIXES)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router.router, prefix=f"{API}/auth", tags=["Auth"])
app.include_router(webhook_router.router, prefix=f"{API}/webhooks", tags=["Webhooks"])
app.include_router(sms_router.router, prefix=f"{API}/sms", tags=["SMS"])
app.include_router(upload_router.router, prefix=f"{API}/uploads", tags=["Uploads"])
app.include_router(system_router.router, prefix=f"{API}/system", tags=["System Check"])

# Root endpoint
@app.get("/")
async def root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME}"}
