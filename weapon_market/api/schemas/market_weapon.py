from decimal import Decimal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UpsertWeaponRequest(_CamelModel):
    """
    Body of PUT /market/weapon/{network}/{weaponId}.

    Every field is optional here; presence of the required ones is checked by
    the use case so that a missing field yields a 400 with the field list.
    ``weaponId`` and ``network`` come from the path.
    """

    price: Decimal | None = None
    weapon_stars: int | None = None
    weapon_element: str | None = None
    stat1_element: str | None = None
    stat1_value: int | None = None
    stat2_element: str | None = None
    stat2_value: int | None = None
    stat3_element: str | None = None
    stat3_value: int | None = None
    timestamp: int | None = None
    seller_address: str | None = None
    buyer_address: str | None = None


class WeaponListingResponse(_CamelModel):
    network: str
    weapon_id: str
    price: float
    weapon_stars: int
    weapon_element: str
    stat1_element: str
    stat1_value: int
    stat2_element: str | None = None
    stat2_value: int | None = None
    stat3_element: str | None = None
    stat3_value: int | None = None
    timestamp: int
    seller_address: str
    buyer_address: str | None = None


class PageInfoResponse(_CamelModel):
    cur_page: int
    cur_offset: int
    total: int
    page_size: int
    num_pages: int


class WeaponSearchResponse(_CamelModel):
    results: list[WeaponListingResponse]
    id_results: list[str]
    page: PageInfoResponse


class AddedResponse(BaseModel):
    added: bool = True


class SoldResponse(BaseModel):
    sold: bool = True


class DeletedResponse(BaseModel):
    deleted: bool = True


class ErrorResponse(BaseModel):
    error: str
