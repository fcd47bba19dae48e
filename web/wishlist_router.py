from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_session
from models.user import UserDTO
from models.wishlistItem import WishlistItemDTO, WishlistRequest
from services.wishlist import WishlistService
from web.dependencies import require_user

wishlist_router = APIRouter(prefix="/api/wishlist", tags=["wishlist"])


@wishlist_router.get("", response_model=list[WishlistItemDTO])
async def get_wishlist(session: AsyncSession = Depends(get_session),
                       user: UserDTO = Depends(require_user)):
    return await WishlistService.get_wishlist(user.id, session)


@wishlist_router.post("", status_code=status.HTTP_201_CREATED, response_model=WishlistItemDTO)
async def add_to_wishlist(payload: WishlistRequest,
                          session: AsyncSession = Depends(get_session),
                          user: UserDTO = Depends(require_user)):
    item, created = await WishlistService.add(user.id, payload.product_id, session)
    if created:
        return item
    return JSONResponse(status_code=status.HTTP_200_OK,
                        content={"message": "Already in wishlist",
                                 "item": item.model_dump(mode="json", by_alias=True)})


@wishlist_router.delete("")
async def remove_from_wishlist(payload: WishlistRequest,
                               session: AsyncSession = Depends(get_session),
                               user: UserDTO = Depends(require_user)):
    await WishlistService.remove(user.id, payload.product_id, session)
    return {"success": True}
