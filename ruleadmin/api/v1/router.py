from fastapi import APIRouter

from ruleadmin.api.v1.endpoints import auth, health, rules
from ruleadmin.core.config import settings

router = APIRouter(prefix=settings.API_PREFIX)

router.include_router(rules.router)
router.include_router(auth.router)
router.include_router(health.router)
