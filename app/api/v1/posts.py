"""Post endpoints. All require a bearer token; writes and deletes require ownership or admin."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.api.v1.auth import error_detail, get_current_principal
from app.core.database import get_db
from app.schemas.auth import Principal
from app.schemas.post import PostRequest, PostResponse, PostsListResponse
from app.services import posts as post_service
from app.services.authorization import ForbiddenError
from app.services.posts import PostNotFoundError

router = APIRouter()


def _not_found(e: PostNotFoundError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error_detail("NotFound", e.message),
    )


def _forbidden(e: ForbiddenError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=error_detail("Forbidden", e.message),
    )


@router.get("", response_model=PostsListResponse)
def list_posts(
    db: Annotated[Session, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> PostsListResponse:
    posts = post_service.list_posts(db, principal)
    return PostsListResponse(posts=[PostResponse.model_validate(p) for p in posts])


@router.get("/mine", response_model=PostsListResponse)
def list_my_posts(
    db: Annotated[Session, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> PostsListResponse:
    """Posts written by the caller."""
    posts = post_service.list_posts_by_author(db, principal)
    return PostsListResponse(posts=[PostResponse.model_validate(p) for p in posts])


@router.get("/{post_id}", response_model=PostResponse)
def get_post(
    post_id: int,
    db: Annotated[Session, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> PostResponse:
    try:
        post = post_service.get_post(db, principal, post_id)
    except PostNotFoundError as e:
        raise _not_found(e) from e
    except ForbiddenError as e:
        raise _forbidden(e) from e
    return PostResponse.model_validate(post)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    body: PostRequest,
    db: Annotated[Session, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> PostResponse:
    """Create a post authored by the caller."""
    post = post_service.create_post(db, principal, body.title, body.content)
    return PostResponse.model_validate(post)


@router.put("/{post_id}", response_model=PostResponse)
def update_post(
    post_id: int,
    body: PostRequest,
    db: Annotated[Session, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> PostResponse:
    """
    Replace a post's title and content.

    404 if the post does not exist; 403 unless the caller is its author or an admin.
    """
    try:
        post = post_service.update_post(db, principal, post_id, body.title, body.content)
    except PostNotFoundError as e:
        raise _not_found(e) from e
    except ForbiddenError as e:
        raise _forbidden(e) from e
    return PostResponse.model_validate(post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: int,
    db: Annotated[Session, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> Response:
    try:
        post_service.delete_post(db, principal, post_id)
    except PostNotFoundError as e:
        raise _not_found(e) from e
    except ForbiddenError as e:
        raise _forbidden(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
