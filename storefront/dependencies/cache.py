from fastapi import Request

from storefront.shared.cache_service import CacheContext


def get_cache(request: Request) -> CacheContext:
    return request.app.state.cache
