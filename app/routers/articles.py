from typing import Annotated, Any, Awaitable

from fastapi import APIRouter, Body, Depends, Path, Response

from app.dependencies import PaginationParams, get_article_service
from app.responses import log_fault, render, server_error
from app.schemas import MAX_ID, ArticleResponse, PaginatedResponse, ValidationErrorResponse
from app.services.article_service import ArticleService

router = APIRouter(prefix="/api/article", tags=["article"])

_ERRORS = {404: {"description": "Article not found"}, 500: {"description": "Server error"}}
_WRITE_ERRORS = {400: {"model": ValidationErrorResponse}, **_ERRORS}

ArticleId = Annotated[int, Path(ge=1, le=MAX_ID)]


async def _call(operation: Awaitable, *, context: str, **render_kwargs: Any) -> Response:
    try:
        result = await operation
    except Exception as exc:
        log_fault(exc, context)
        return server_error()
    return render(result, context=context, **render_kwargs)


@router.get("", response_model=PaginatedResponse, responses={500: _ERRORS[500]})
async def list_articles(
    pagination: PaginationParams = Depends(),
    service: ArticleService = Depends(get_article_service),
):
    return await _call(
        service.list_articles(
            pagination.page, pagination.page_size, pagination.sort_by, pagination.sort_order
        ),
        context="article list",
        body=lambda page: page.model_dump(),
    )


@router.get("/{article_id}", response_model=ArticleResponse, responses=_ERRORS)
async def get_article(
    article_id: ArticleId, service: ArticleService = Depends(get_article_service)
):
    return await _call(service.get_article(article_id), context=f"article read id={article_id}")


@router.post("", status_code=201, response_model=ArticleResponse, responses=_WRITE_ERRORS)
async def create_article(
    payload: Any = Body(None),
    service: ArticleService = Depends(get_article_service),
):
    return await _call(service.create_article(payload), context="article create", status_code=201)


@router.put("/{article_id}", response_model=ArticleResponse, responses=_WRITE_ERRORS)
async def update_article(
    article_id: ArticleId,
    payload: Any = Body(None),
    service: ArticleService = Depends(get_article_service),
):
    return await _call(
        service.update_article(article_id, payload), context=f"article update id={article_id}"
    )


@router.delete("/{article_id}", status_code=204, responses=_ERRORS)
async def delete_article(
    article_id: ArticleId, service: ArticleService = Depends(get_article_service)
):
    return await _call(
        service.delete_article(article_id),
        context=f"article delete id={article_id}",
        status_code=204,
    )
