from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response

from weapon_market.api.dependencies import get_is_authenticated, get_search_use_case
from weapon_market.api.schemas.market_weapon import ErrorResponse, WeaponSearchResponse
from weapon_market.application.query_builder import SearchParams
from weapon_market.application.use_cases.search_weapon_listings import (
    SearchWeaponListings,
    SearchWeaponListingsInput,
)

router = APIRouter(tags=["search"])


@router.get(
    "/static/market/weapon",
    response_class=Response,
    responses={
        200: {"model": WeaponSearchResponse, "content": {"application/json": {}}},
        500: {"model": ErrorResponse},
    },
)
async def search_weapons(
    background_tasks: BackgroundTasks,
    element: str | None = Query(default=None),
    min_stars: str | None = Query(default=None, alias="minStars"),
    max_stars: str | None = Query(default=None, alias="maxStars"),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_dir: str | None = Query(default=None, alias="sortDir"),
    page_size: str | None = Query(default=None, alias="pageSize"),
    page_num: str | None = Query(default=None, alias="pageNum"),
    seller_address: str | None = Query(default=None, alias="sellerAddress"),
    buyer_address: str | None = Query(default=None, alias="buyerAddress"),
    min_price: str | None = Query(default=None, alias="minPrice"),
    max_price: str | None = Query(default=None, alias="maxPrice"),
    network: str | None = Query(default=None),
    is_authenticated: bool = Depends(get_is_authenticated),
    use_case: SearchWeaponListings = Depends(get_search_use_case),
) -> Response:
    """Search active weapon listings. Anonymous searches may be served from cache."""
    output = await use_case.execute(
        SearchWeaponListingsInput(
            params=SearchParams(
                element=element,
                min_stars=min_stars,
                max_stars=max_stars,
                sort_by=sort_by,
                sort_dir=sort_dir,
                page_size=page_size,
                page_num=page_num,
                seller_address=seller_address,
                buyer_address=buyer_address,
                min_price=min_price,
                max_price=max_price,
                network=network,
            ),
            is_authenticated=is_authenticated,
        )
    )

    # Runs after the response has been sent
    if not output.from_cache:
        background_tasks.add_task(use_case.populate_cache, output)

    return Response(content=output.body, media_type="application/json")
