from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from app.core.config import settings
from app.utils.security import decode_access_token


class AuthMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, whitelist: list[str] = None, public_prefixes: list[str] = None):
        super().__init__(app)
        self.whitelist = whitelist or []  # Routes that do NOT require auth
        self.public_prefixes = tuple(public_prefixes or [])

    def is_public(self, path: str) -> bool:
        return path in self.whitelist or path.startswith(self.public_prefixes)

    async def dispatch(self, request: Request, call_next):
        # Preflight requests are answered by CORS
        if request.method == "OPTIONS" or self.is_public(request.url.path):
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return JSONResponse(
                status_code=401,
                content={"success": False, "message": "Missing or invalid Authorization header"}
            )

        token = auth_header.split(" ", 1)[1]
        payload = decode_access_token(token, settings)
        if payload is None:
            return JSONResponse(
                status_code=401,
                content={"success": False, "message": "Invalid or expired token"}
            )

        # Store decoded JWT in request.state
        request.state.user = payload

        response = await call_next(request)
        return response
