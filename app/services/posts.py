"""Post operations. Every operation takes the acting principal explicitly."""

import logging

from sqlalchemy.orm import Session

from app.models.post import Post
from app.schemas.auth import Principal
from app.services.authorization import Action, ForbiddenError, ensure_allowed

logger = logging.getLogger(__name__)


class PostNotFoundError(Exception):
    """Raised when a post id does not exist."""

    def __init__(self, post_id: int) -> None:
        self.message = f"Post {post_id} not found"
        self.post_id = post_id
        super().__init__(self.message)


def find_post(db: Session, post_id: int) -> Post:
    """Existence lookup; raises PostNotFoundError. No authorization here."""
    post = db.get(Post, post_id)
    if post is None:
        raise PostNotFoundError(post_id)
    return post


def list_posts(db: Session, principal: Principal) -> list[Post]:
    return db.query(Post).order_by(Post.id).all()


def list_posts_by_author(db: Session, principal: Principal) -> list[Post]:
    return db.query(Post).filter(Post.author_id == principal.id).order_by(Post.id).all()


def get_post(db: Session, principal: Principal, post_id: int) -> Post:
    post = find_post(db, post_id)
    ensure_allowed(principal, post.author_id, Action.READ)
    return post


def create_post(db: Session, principal: Principal, title: str, content: str) -> Post:
    post = Post(title=title, content=content, author_id=principal.id)
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("Post created", extra={"post_id": post.id, "user_id": principal.id})
    return post


def update_post(db: Session, principal: Principal, post_id: int, title: str, content: str) -> Post:
    """
    Replace title and content of a post.

    Raises PostNotFoundError if absent, then ForbiddenError unless the
    principal is the author or an admin.
    """
    post = find_post(db, post_id)
    _authorize(principal, post, Action.WRITE)
    post.title = title
    post.content = content
    db.commit()
    db.refresh(post)
    logger.info("Post updated", extra={"post_id": post.id, "user_id": principal.id})
    return post


def delete_post(db: Session, principal: Principal, post_id: int) -> None:
    """Delete a post; same existence-then-ownership checks as update_post."""
    post = find_post(db, post_id)
    _authorize(principal, post, Action.DELETE)
    db.delete(post)
    db.commit()
    logger.info("Post deleted", extra={"post_id": post_id, "user_id": principal.id})


def _authorize(principal: Principal, post: Post, action: Action) -> None:
    try:
        ensure_allowed(principal, post.author_id, action)
    except ForbiddenError:
        logger.info(
            "Authorization denied",
            extra={"post_id": post.id, "user_id": principal.id, "action": action.value},
        )
        raise
