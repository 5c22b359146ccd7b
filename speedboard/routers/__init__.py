# API routers for the PageSpeed dashboard

from fastapi import APIRouter

from .pagespeed import router as pagespeed_router
from .results import router as results_router

router = APIRouter()
router.include_router(pagespeed_router, tags=['pagespeed'])
router.include_router(results_router, tags=['results'])
