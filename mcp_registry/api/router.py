from fastapi import APIRouter

from mcp_registry.api.endpoints.health import router as health_router
from mcp_registry.api.endpoints.servers import router as servers_router
from mcp_registry.api.endpoints.submissions import router as submissions_router
from mcp_registry.api.endpoints.verification import router as verification_router
from mcp_registry.api.endpoints.accounts import router as accounts_router
from mcp_registry.api.endpoints.bootstrap import router as bootstrap_router
from mcp_registry.api.endpoints.admin import router as admin_router


router = APIRouter(prefix="/api")
router.include_router(health_router, tags=["health"])
router.include_router(servers_router, tags=["servers"])
router.include_router(submissions_router, tags=["submissions"])
router.include_router(verification_router, tags=["verification"])
router.include_router(accounts_router, tags=["accounts"])
router.include_router(bootstrap_router, tags=["admin"])
router.include_router(admin_router, tags=["admin"])
