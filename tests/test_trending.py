"""
Tests for the home page lists and aggregates.

Trending uses the trailing 7 days only to decide eligibility; ranking is by
total vote count.
"""

from datetime import timedelta

from trending import home_page, recent_products, site_stats, top_locations, trending_products


def _titles(items):
    return [item.title for item in items]


class TestTrending:
    def test_requires_a_vote_inside_the_window(self, db, make):
        fresh = make.product(title="Fresh")
        stale = make.product(title="Stale")
        make.vote(fresh, created_at=make.days_ago(6))
        make.votes(stale, 4, created_at=make.days_ago(8))

        assert _titles(trending_products(db)) == ["Fresh"]

    def test_ranks_by_total_votes_not_window_votes(self, db, make):
        veteran = make.product(title="Veteran")
        make.votes(veteran, 9, created_at=make.days_ago(30))
        make.vote(veteran, created_at=make.days_ago(6))

        newcomer = make.product(title="Newcomer")
        make.votes(newcomer, 2, created_at=make.days_ago(0, hours=1))

        result = trending_products(db)

        assert _titles(result) == ["Veteran", "Newcomer"]
        assert result[0].votes_count == 10

    def test_excludes_foreign_products(self, db, make):
        foreign = make.product(title="Foreign", is_made_in_my=False)
        make.votes(foreign, 5)
        local = make.product(title="Local")
        make.vote(local)

        assert _titles(trending_products(db)) == ["Local"]

    def test_respects_limit(self, db, make):
        for _ in range(8):
            make.vote(make.product())

        assert len(trending_products(db)) == 6
        assert len(trending_products(db, limit=3)) == 3

    def test_window_is_measured_from_now(self, db, make):
        product = make.product(title="Product")
        make.vote(product, created_at=make.days_ago(3))

        assert _titles(trending_products(db, now=make.days_ago(-5))) == []
        assert _titles(trending_products(db, now=make.days_ago(-3))) == ["Product"]

    def test_window_includes_a_vote_exactly_seven_days_old(self, db, make):
        product = make.product(title="Edge")
        vote = make.vote(product, created_at=make.days_ago(10))

        now = vote.created_at + timedelta(days=7)

        assert _titles(trending_products(db, now=now)) == ["Edge"]
        assert _titles(trending_products(db, now=now + timedelta(microseconds=1))) == []


class TestRecent:
    def test_newest_first_without_vote_requirement(self, db, make):
        for days in range(8):
            make.product(title=f"Day {days}", created_at=make.days_ago(days))
        make.product(title="Foreign", is_made_in_my=False)

        result = recent_products(db)

        assert _titles(result) == [f"Day {days}" for days in range(6)]


class TestAggregates:
    def test_site_stats_only_count_malaysia_made(self, db, make):
        local = make.product()
        other_local = make.product()
        foreign = make.product(is_made_in_my=False)
        make.votes(local, 2)
        make.votes(other_local, 1)
        make.votes(foreign, 7)

        stats = site_stats(db)

        assert stats.total_products == 2
        assert stats.total_votes == 3

    def test_top_locations_ranked_by_product_count(self, db, make):
        for location, count in [("Penang", 3), ("Johor", 2), ("Sabah", 2), ("Perak", 1),
                                ("Kedah", 1), ("Melaka", 1)]:
            for _ in range(count):
                make.product(location=location)
        make.product(location=None)
        for _ in range(5):
            make.product(location="Singapore", is_made_in_my=False)

        result = top_locations(db)

        assert [(entry.location, entry.count) for entry in result] == [
            ("Penang", 3), ("Johor", 2), ("Sabah", 2), ("Kedah", 1), ("Melaka", 1),
        ]

    def test_home_page_bundles_everything(self, db, make):
        product = make.product(title="Only", location="Penang")
        make.vote(product)

        page = home_page(db)

        assert _titles(page.trending_products) == ["Only"]
        assert _titles(page.recent_products) == ["Only"]
        assert page.stats.total_votes == 1
        assert page.top_locations[0].location == "Penang"
