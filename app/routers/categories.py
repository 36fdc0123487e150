from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response

from app.dependencies import get_category_service
from app.responses import log_fault, render, server_error
from app.schemas import MAX_ID, CategoryResponse
from app.services.category_service import CategoryService

router = APIRouter(prefix="/api/category", tags=["category"])


@router.get(
    "/{user_id}",
    response_model=list[CategoryResponse],
    responses={404: {"description": "User has no categories"}, 500: {"description": "Server error"}},
)
async def get_category_list(
    user_id: Annotated[int, Path(ge=1, le=MAX_ID)],
    service: CategoryService = Depends(get_category_service),
) -> Response:
    context = f"category lookup for user_id={user_id}"
    try:
        result = await service.get_category_list(user_id)
    except Exception as exc:
        log_fault(exc, context)
        return server_error()
    return render(result, context=context)
