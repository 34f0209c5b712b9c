from fastapi import APIRouter, Depends

from app.core.context import AppContext
from app.core.deps import get_context

router = APIRouter(prefix="/v1/cache", tags=["cache"])


@router.get("")
def get_cache_sizes(ctx: AppContext = Depends(get_context)):
    # raw sizes, expired-but-unread entries included
    return {name: cache.size for name, cache in ctx.caches().items()}


@router.post("/cleanup")
def post_cache_cleanup(ctx: AppContext = Depends(get_context)):
    return {"removed": ctx.cleanup()}
