import logging
from typing import Mapping, Optional

from sqlalchemy.orm import Session

import models
from auth import require_user
from comments import to_comment_out
from errors import NotFound
from product_query import product_rows, to_summary
from schemas import ProductDetail, ProductFormOptions, ProductSummary
from validation import validate_product
from votes import has_voted

logger = logging.getLogger(__name__)


def form_options() -> ProductFormOptions:
    return ProductFormOptions(
        project_types=list(models.PROJECT_TYPES),
        locations=list(models.MALAYSIAN_LOCATIONS),
    )


def create_product(db: Session, user_id: Optional[int], data: Mapping[str, object]) -> ProductSummary:
    user_id = require_user(user_id)
    payload = validate_product(data).unwrap()

    product = models.Product(author_id=user_id, **payload.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)

    logger.info("User %s submitted product %s", user_id, product.id)
    return to_summary((product, product.author.name, 0, 0))


def get_product_detail(db: Session, product_id: int, viewer_id: Optional[int] = None) -> ProductDetail:
    """Product with counts, its comments newest first, and whether the viewer has voted."""
    row = product_rows(db).filter(models.Product.id == product_id).first()
    if row is None:
        raise NotFound("Product not found")

    comments = (
        db.query(models.Comment)
        .filter(models.Comment.product_id == product_id)
        .order_by(models.Comment.created_at.desc(), models.Comment.id.desc())
        .all()
    )

    summary = to_summary(row)
    return ProductDetail(
        **summary.model_dump(),
        comments=[to_comment_out(comment) for comment in comments],
        user_has_voted=has_voted(db, viewer_id, product_id),
    )
