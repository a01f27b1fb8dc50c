import logging
from typing import Optional

from sqlalchemy.orm import Session

import models
from auth import require_user
from errors import Forbidden, NotFound
from schemas import CommentOut
from validation import validate_comment

logger = logging.getLogger(__name__)


def to_comment_out(comment: models.Comment) -> CommentOut:
    return CommentOut(
        id=comment.id,
        content=comment.content,
        product_id=comment.product_id,
        author_id=comment.author_id,
        author_name=comment.author.name,
        created_at=comment.created_at,
    )


def add_comment(db: Session, user_id: Optional[int], product_id: Optional[int],
                content: Optional[str]) -> CommentOut:
    """Append a comment to a product. There is no edit; comments are only added or deleted."""
    user_id = require_user(user_id)
    payload = validate_comment({"content": content, "product_id": product_id}).unwrap()

    if not db.get(models.Product, payload.product_id):
        raise NotFound("Product not found")

    comment = models.Comment(content=payload.content, author_id=user_id, product_id=payload.product_id)
    db.add(comment)
    db.commit()
    db.refresh(comment)

    logger.info("User %s commented on product %s", user_id, payload.product_id)
    return to_comment_out(comment)


def delete_comment(db: Session, user_id: Optional[int], comment_id: int) -> None:
    user_id = require_user(user_id)

    comment = db.get(models.Comment, comment_id)
    if not comment:
        raise NotFound("Comment not found")

    if comment.author_id != user_id:
        logger.warning("User %s tried to delete comment %s owned by %s", user_id, comment_id, comment.author_id)
        raise Forbidden("You can only delete your own comments")

    db.delete(comment)
    db.commit()
    logger.info("User %s deleted comment %s", user_id, comment_id)
