from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

import models
from config import Config
from product_query import made_in_malaysia, product_rows, to_summary, votes_count_column
from schemas import HomePage, LocationCount, ProductSummary, SiteStats


def trending_products(db: Session, limit: int = Config.HOME_LIST_LIMIT,
                      now: Optional[datetime] = None) -> List[ProductSummary]:
    cutoff = (now or models.utcnow()) - timedelta(days=Config.TRENDING_WINDOW_DAYS)
    voted_recently = (
        select(models.Vote.id)
        .where(models.Vote.product_id == models.Product.id, models.Vote.created_at >= cutoff)
        .exists()
    )

    votes_count = votes_count_column()
    rows = (
        product_rows(db, votes_count)
        .filter(made_in_malaysia(), voted_recently)
        .order_by(votes_count.desc(), models.Product.created_at.desc(), models.Product.id.desc())
        .limit(limit)
        .all()
    )
    return [to_summary(row) for row in rows]


def recent_products(db: Session, limit: int = Config.HOME_LIST_LIMIT) -> List[ProductSummary]:
    rows = (
        product_rows(db)
        .filter(made_in_malaysia())
        .order_by(models.Product.created_at.desc(), models.Product.id.desc())
        .limit(limit)
        .all()
    )
    return [to_summary(row) for row in rows]


def site_stats(db: Session) -> SiteStats:
    total_products = db.query(func.count(models.Product.id)).filter(made_in_malaysia()).scalar()
    total_votes = (
        db.query(func.count(models.Vote.id))
        .select_from(models.Vote)
        .join(models.Product, models.Vote.product_id == models.Product.id)
        .filter(made_in_malaysia())
        .scalar()
    )
    return SiteStats(total_products=total_products, total_votes=total_votes)


def top_locations(db: Session, limit: int = Config.TOP_LOCATIONS_LIMIT) -> List[LocationCount]:
    products_count = func.count(models.Product.id).label("products_count")
    rows = (
        db.query(models.Product.location, products_count)
        .filter(made_in_malaysia(), models.Product.location.isnot(None))
        .group_by(models.Product.location)
        .order_by(products_count.desc(), models.Product.location.asc())
        .limit(limit)
        .all()
    )
    return [LocationCount(location=location, count=count) for location, count in rows]


def home_page(db: Session, now: Optional[datetime] = None) -> HomePage:
    return HomePage(
        trending_products=trending_products(db, now=now),
        recent_products=recent_products(db),
        stats=site_stats(db),
        top_locations=top_locations(db),
    )
