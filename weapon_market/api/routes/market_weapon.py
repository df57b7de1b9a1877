from fastapi import APIRouter, Depends

from weapon_market.api.dependencies import (
    get_delete_seller_use_case,
    get_delete_use_case,
    get_mark_sold_use_case,
    get_upsert_use_case,
    require_authenticated,
)
from weapon_market.api.schemas.market_weapon import (
    AddedResponse,
    DeletedResponse,
    ErrorResponse,
    SoldResponse,
    UpsertWeaponRequest,
)
from weapon_market.application.use_cases.delete_weapon_listings import (
    DeleteSellerListings,
    DeleteSellerListingsInput,
    DeleteWeaponListing,
    DeleteWeaponListingInput,
)
from weapon_market.application.use_cases.mark_weapon_sold import (
    MarkWeaponSold,
    MarkWeaponSoldInput,
)
from weapon_market.application.use_cases.upsert_weapon_listing import (
    UpsertWeaponListing,
    UpsertWeaponListingInput,
)

router = APIRouter(
    prefix="/market/weapon",
    tags=["market"],
    dependencies=[Depends(require_authenticated)],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


# Registered first so that "all" is never taken for a network name.
@router.delete("/all/{seller_address}", response_model=DeletedResponse)
async def delete_seller_weapons(
    seller_address: str,
    use_case: DeleteSellerListings = Depends(get_delete_seller_use_case),
) -> DeletedResponse:
    """Remove every listing of a seller, on all networks."""
    await use_case.execute(DeleteSellerListingsInput(seller_address=seller_address))
    return DeletedResponse()


@router.put("/{network}/{weapon_id}", response_model=AddedResponse)
async def upsert_weapon(
    network: str,
    weapon_id: str,
    body: UpsertWeaponRequest,
    use_case: UpsertWeaponListing = Depends(get_upsert_use_case),
) -> AddedResponse:
    await use_case.execute(
        UpsertWeaponListingInput(network=network, weapon_id=weapon_id, **body.model_dump())
    )
    return AddedResponse()


@router.get("/{network}/{weapon_id}/sell", response_model=SoldResponse)
async def sell_weapon(
    network: str,
    weapon_id: str,
    use_case: MarkWeaponSold = Depends(get_mark_sold_use_case),
) -> SoldResponse:
    await use_case.execute(MarkWeaponSoldInput(network=network, weapon_id=weapon_id))
    return SoldResponse()


@router.delete("/{network}/{weapon_id}", response_model=DeletedResponse)
async def delete_weapon(
    network: str,
    weapon_id: str,
    use_case: DeleteWeaponListing = Depends(get_delete_use_case),
) -> DeletedResponse:
    await use_case.execute(DeleteWeaponListingInput(network=network, weapon_id=weapon_id))
    return DeletedResponse()
