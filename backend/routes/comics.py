"""Comic routes: thin wrappers over XKCDService.

GET /api/comics/latest        latest comic
GET /api/comics/random        random comic
GET /api/comics/search        substring search over recent comics
GET /api/comics/{comic_id}    comic by id
"""

import logging

from fastapi import APIRouter, Depends, Query, Request

from services.xkcd import XKCDService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/comics", tags=["comics"])


def get_xkcd_service(request: Request) -> XKCDService:
    """Dependency returning the app-wide service (overridable in tests)."""
    return request.app.state.xkcd


@router.get("/latest")
async def latest(service: XKCDService = Depends(get_xkcd_service)) -> dict:
    return await service.get_latest()


@router.get("/random")
async def random_comic(service: XKCDService = Depends(get_xkcd_service)) -> dict:
    return await service.get_random()


# Declared before /{comic_id} so "search" is never read as an id.
@router.get("/search")
async def search(
    q: str = Query(...),
    page: int = Query(1),
    limit: int = Query(10),
    service: XKCDService = Depends(get_xkcd_service),
) -> dict:
    """Search the last 100 comics. Range checks live in XKCDService.search."""
    return await service.search(q.strip(), page, limit)


@router.get("/{comic_id}")
async def comic_by_id(comic_id: int, service: XKCDService = Depends(get_xkcd_service)) -> dict:
    logger.debug("Comic requested: #%d", comic_id)
    return await service.get_by_id(comic_id)
