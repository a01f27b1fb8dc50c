import enum
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models
from auth import require_user
from errors import NotFound

logger = logging.getLogger(__name__)


class VoteState(str, enum.Enum):
    VOTED = "voted"
    REMOVED = "removed"


@dataclass
class VoteResult:
    state: VoteState
    votes_count: int


def _find_vote(db: Session, user_id: int, product_id: int) -> Optional[models.Vote]:
    return db.query(models.Vote).filter(
        models.Vote.user_id == user_id,
        models.Vote.product_id == product_id,
    ).first()


def count_votes(db: Session, product_id: int) -> int:
    return db.query(func.count(models.Vote.id)).filter(models.Vote.product_id == product_id).scalar()


def has_voted(db: Session, user_id: Optional[int], product_id: int) -> bool:
    if user_id is None:
        return False
    return _find_vote(db, user_id, product_id) is not None


def toggle_vote(db: Session, user_id: Optional[int], product_id: int) -> VoteResult:
    user_id = require_user(user_id)

    product = db.get(models.Product, product_id)
    if not product:
        raise NotFound("Product not found")

    existing_vote = _find_vote(db, user_id, product_id)

    if existing_vote:
        deleted = db.query(models.Vote).filter(
            models.Vote.id == existing_vote.id
        ).delete(synchronize_session=False)
        db.commit()
        if not deleted:
            logger.info("Vote by user %s on product %s was already removed", user_id, product_id)
        state = VoteState.REMOVED
    else:
        db.add(models.Vote(user_id=user_id, product_id=product_id))
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if _find_vote(db, user_id, product_id) is None:
                # not a duplicate, e.g. a missing user or a product deleted meanwhile
                raise
            logger.warning("Duplicate vote by user %s on product %s, keeping existing vote", user_id, product_id)
        state = VoteState.VOTED

    db.expire_all()
    votes_count = count_votes(db, product_id)
    logger.info("User %s %s product %s (%d votes)", user_id, state.value, product_id, votes_count)
    return VoteResult(state=state, votes_count=votes_count)
