# passwatch/app/api/v1/router.py
from fastapi import APIRouter
from passwatch.app.api.v1.endpoints import auth, credentials, login_ips, password_logs

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(login_ips.router, prefix="/login-ips", tags=["login-ips"])
api_router.include_router(password_logs.router, prefix="/password-logs", tags=["password-logs"])
api_router.include_router(credentials.router, prefix="/credentials", tags=["credentials"])
