import math
from typing import List, Optional

from sqlalchemy import cast, func, select
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Session

import models
from config import Config
from errors import ValidationError
from schemas import FilterOptions, PagedProducts, ProductFilters, ProductSummary

SORT_POPULAR = "popular"
SORT_RECENT = "recent"


def votes_count_column():
    return (
        select(func.count(models.Vote.id))
        .where(models.Vote.product_id == models.Product.id)
        .correlate(models.Product)
        .scalar_subquery()
        .label("votes_count")
    )


def comments_count_column():
    return (
        select(func.count(models.Comment.id))
        .where(models.Comment.product_id == models.Product.id)
        .correlate(models.Product)
        .scalar_subquery()
        .label("comments_count")
    )


def made_in_malaysia():
    return models.Product.is_made_in_my.is_(True)


def product_rows(db: Session, votes_count=None):
    """Products joined with their author name and fresh vote/comment counts."""
    votes_count = votes_count if votes_count is not None else votes_count_column()
    return db.query(
        models.Product,
        models.User.name,
        votes_count,
        comments_count_column(),
    ).join(models.User, models.Product.author_id == models.User.id)


def to_summary(row) -> ProductSummary:
    product, author_name, votes_count, comments_count = row
    return ProductSummary(
        id=product.id,
        title=product.title,
        description=product.description,
        url=product.url,
        tags=product.tags or [],
        project_type=product.project_type,
        location=product.location,
        is_made_in_my=product.is_made_in_my,
        author_id=product.author_id,
        author_name=author_name,
        created_at=product.created_at,
        votes_count=votes_count or 0,
        comments_count=comments_count or 0,
    )


def resolve_sort(sort_by: Optional[str]) -> str:
    """Missing or ``popular`` sorts by votes; any other value sorts by date."""
    normalized = (sort_by or SORT_POPULAR).strip().lower()
    if not normalized or normalized == SORT_POPULAR:
        return SORT_POPULAR
    return SORT_RECENT


def tag_predicate(db: Session, tag: str):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return cast(models.Product.tags, JSONB).contains([tag])
    if dialect == "mysql":
        return func.json_contains(models.Product.tags, func.json_quote(tag)) == 1
    tag_values = func.json_each(models.Product.tags).table_valued("value")
    return select(tag_values.c.value).where(tag_values.c.value == tag).exists()


def filter_predicates(db: Session, filters: ProductFilters) -> list:
    predicates = [made_in_malaysia()]
    if filters.type:
        predicates.append(models.Product.project_type == filters.type)
    if filters.location:
        predicates.append(models.Product.location == filters.location)
    if filters.tag:
        predicates.append(tag_predicate(db, filters.tag.strip().lower()))
    return predicates


def query_products(db: Session, filters: Optional[ProductFilters] = None, page: int = 1) -> PagedProducts:
    filters = filters or ProductFilters()
    if page < 1:
        raise ValidationError({"page": ["The page must be at least 1."]})

    if filters.type and filters.type not in models.PROJECT_TYPES:
        # no product can match an unknown type; the enum column would reject the bind
        predicates = None
    else:
        predicates = filter_predicates(db, filters)

    per_page = Config.PAGE_SIZE
    if predicates is None:
        return PagedProducts(items=[], page=page, per_page=per_page, total=0, last_page=1)

    total = db.query(func.count(models.Product.id)).filter(*predicates).scalar()

    votes_count = votes_count_column()
    query = product_rows(db, votes_count).filter(*predicates)
    if filters.sort == SORT_POPULAR:
        query = query.order_by(votes_count.desc(), models.Product.created_at.desc(), models.Product.id.desc())
    else:
        query = query.order_by(models.Product.created_at.desc(), models.Product.id.desc())

    rows = query.offset((page - 1) * per_page).limit(per_page).all()

    return PagedProducts(
        items=[to_summary(row) for row in rows],
        page=page,
        per_page=per_page,
        total=total,
        last_page=max(1, math.ceil(total / per_page)),
    )


def location_facets(db: Session) -> List[str]:
    rows = (
        db.query(models.Product.location)
        .filter(made_in_malaysia(), models.Product.location.isnot(None))
        .distinct()
        .all()
    )
    return sorted(location for (location,) in rows)


def tag_facets(db: Session) -> List[str]:
    rows = db.query(models.Product.tags).filter(made_in_malaysia()).all()
    return sorted({tag for (tags,) in rows for tag in (tags or [])})


def filter_options(db: Session) -> FilterOptions:
    return FilterOptions(
        project_types=list(models.PROJECT_TYPES),
        locations=location_facets(db),
        tags=tag_facets(db),
    )
