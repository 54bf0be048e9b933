from fastapi import APIRouter

from app.api.v1.routes_admin import router as admin_router
from app.api.v1.routes_analysis import router as analysis_router
from app.api.v1.routes_auth import router as auth_router
from app.api.v1.routes_domain import router as domain_router
from app.api.v1.routes_project import router as project_router
from app.api.v1.routes_reputation import router as reputation_router


api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["auth"])

api_router.include_router(project_router, prefix="/projects", tags=["projects"])
api_router.include_router(domain_router, prefix="/projects", tags=["domains"])
api_router.include_router(analysis_router, prefix="/projects", tags=["analysis"])

api_router.include_router(reputation_router, prefix="/reputation", tags=["reputation"])

api_router.include_router(admin_router, prefix="/admin", tags=["admin"])
