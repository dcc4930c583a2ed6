"""
Tests for dashboard statistics, category-based suggestions and the weekly menu.
"""

import random
import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from services.stats_service import StatsService, cuisine_breakdown
from services.suggestion_service import (
    SuggestionService,
    blast_from_past,
    categorize,
    cuisine_youre_missing,
    give_it_another_shot,
    menu_weight,
    pick_random,
    reliable_favorites,
    weekly_menu,
)
from domain.enums import SuggestionCategoryId
from test_fixtures import (
    db_session,
    days_ago,
    make_dish,
    make_dish_entity,
    make_tag,
    user_id,
)
from services import DishService

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def names(dishes):
    return sorted(dish.name for dish in dishes)


# =============================================================================
# STATS
# =============================================================================


def test_stats_for_empty_account(db_session: Session, user_id):
    stats = StatsService.get_stats(db_session, user_id)
    assert stats.total_dishes == 0
    assert stats.total_times_cooked == 0
    assert stats.most_cooked is None
    assert stats.top_dishes == []
    assert stats.recently_cooked == []


def test_stats_totals_and_rankings(db_session: Session, user_id):
    make_dish(db_session, user_id, "Tacos", ["Mexican"], cooked=[days_ago(n) for n in (1, 4, 8)])
    make_dish(db_session, user_id, "Risotto", ["Italian"], cooked=[days_ago(2)])
    make_dish(db_session, user_id, "Gazpacho", ["Spanish"])

    stats = StatsService.get_stats(db_session, user_id)

    assert stats.total_dishes == 3
    assert stats.total_times_cooked == 4
    assert stats.most_cooked.name == "Tacos"
    assert stats.most_cooked.times_cooked == 3
    assert [d.name for d in stats.top_dishes] == ["Tacos", "Risotto"]
    assert stats.cuisine_breakdown == {"Mexican": 1, "Italian": 1, "Spanish": 1}
    assert [entry.dish.name for entry in stats.recently_cooked] == [
        "Tacos",
        "Risotto",
        "Tacos",
        "Tacos",
    ]


def test_recently_cooked_is_limited_to_five(db_session: Session, user_id):
    make_dish(db_session, user_id, cooked=[days_ago(n) for n in range(1, 9)])
    stats = StatsService.get_stats(db_session, user_id)
    assert len(stats.recently_cooked) == 5


def test_cuisine_breakdown_counts_cuisine_tags_once():
    dishes = [
        make_dish_entity("Pizza", ["Italian"]).model_copy(update={"tags": ["Italian", "Quick"]}),
        make_dish_entity("Sushi", ["Japanese", "Asian"]),
        make_dish_entity("Burger", ["American"]).model_copy(update={"tags": ["Fusion"]}),
    ]
    assert cuisine_breakdown(dishes) == {
        "Italian": 1,
        "Japanese": 1,
        "Asian": 1,
        "American": 1,
        "Fusion": 1,
    }


def test_stats_cuisine_breakdown_includes_tags(db_session: Session, user_id):
    dish = make_dish(db_session, user_id, "Pad Krapow", ["Other"])
    tag = make_tag(db_session, user_id, "Thai", category="cuisine")
    DishService.add_tag(db_session, user_id, dish.id, tag.id)

    stats = StatsService.get_stats(db_session, user_id)
    assert stats.cuisine_breakdown == {"Other": 1, "Thai": 1}


# =============================================================================
# SUGGESTION CATEGORIES
# =============================================================================


def suggestion_pool():
    return [
        make_dish_entity("Weekly Curry", ["Thai"], times_cooked=6, last_made=days_ago(5, NOW)),
        make_dish_entity("Old Lasagna", ["Italian"], times_cooked=4, last_made=days_ago(90, NOW)),
        make_dish_entity("Tried Tagine", ["Middle Eastern"], times_cooked=1, last_made=days_ago(45, NOW)),
        make_dish_entity("Fresh Tagine", ["Middle Eastern"], times_cooked=2, last_made=days_ago(3, NOW)),
        make_dish_entity("Untouched Pierogi", ["Other"]),
    ]


def test_reliable_favorites():
    assert names(reliable_favorites(suggestion_pool(), NOW)) == ["Weekly Curry"]


def test_blast_from_past():
    assert names(blast_from_past(suggestion_pool(), NOW)) == ["Old Lasagna"]


def test_give_it_another_shot():
    assert names(give_it_another_shot(suggestion_pool(), NOW)) == ["Tried Tagine"]


def test_cuisine_youre_missing_uses_most_recent_cook_per_cuisine():
    # Middle Eastern was cooked 3 days ago through Fresh Tagine, so neither tagine counts
    assert names(cuisine_youre_missing(suggestion_pool(), NOW)) == [
        "Old Lasagna",
        "Untouched Pierogi",
    ]


def test_pick_random_limits_and_keeps_small_lists():
    items = list(range(10))
    picked = pick_random(items, 3, random.Random(7))
    assert len(picked) == 3
    assert set(picked) <= set(items)
    assert pick_random([1, 2], 3) == [1, 2]


def test_categorize_empty_category_has_message():
    category = categorize([], SuggestionCategoryId.RELIABLE_FAVORITES, 3, now=NOW)
    assert category.id == "reliable-favorites"
    assert category.title == "Reliable Favorites"
    assert category.dishes == []
    assert category.empty_message == "Cook your favorites more to see them here!"


def test_get_suggestions_returns_every_category(db_session: Session, user_id):
    make_dish(db_session, user_id, "Daily Dal", ["Indian"], cooked=[days_ago(n) for n in range(1, 7)])

    categories = SuggestionService.get_suggestions(db_session, user_id, rng=random.Random(1))

    assert [c.id for c in categories] == [
        "reliable-favorites",
        "blast-from-past",
        "give-it-another-shot",
        "cuisine-youre-missing",
    ]
    assert [d.name for d in categories[0].dishes] == ["Daily Dal"]


def test_refresh_category(db_session: Session, user_id):
    make_dish(db_session, user_id, "Forgotten Soup", ["French"], cooked=[days_ago(40)])

    category = SuggestionService.refresh_category(
        db_session, user_id, "give-it-another-shot", rng=random.Random(3)
    )
    assert [d.name for d in category.dishes] == ["Forgotten Soup"]

    with pytest.raises(NotFoundError):
        SuggestionService.refresh_category(db_session, user_id, "dessert-roulette")


def test_suggestions_ignore_other_users(db_session: Session, user_id):
    make_dish(db_session, uuid.uuid4(), "Not Mine", ["Greek"], cooked=[days_ago(100)])
    categories = SuggestionService.get_suggestions(db_session, user_id)
    assert all(category.dishes == [] for category in categories)


# =============================================================================
# WEEKLY MENU
# =============================================================================


def test_menu_weight_components():
    never_cooked = make_dish_entity("New Ramen")
    tried_once = make_dish_entity("Shakshuka", times_cooked=1, last_made=days_ago(14, NOW))
    old_favorite = make_dish_entity("Moussaka", times_cooked=4, last_made=days_ago(120, NOW))
    staple = make_dish_entity("Toast", times_cooked=9, last_made=NOW)

    assert menu_weight(never_cooked, NOW) == 10
    assert menu_weight(tried_once, NOW) == pytest.approx(10 / 2 + 14 / 7)
    # recency caps at 10, plus the old favourite bonus
    assert menu_weight(old_favorite, NOW) == pytest.approx(10 / 5 + 10 + 5)
    assert menu_weight(staple, NOW) == pytest.approx(1 + 1 / 7)


def test_old_favorite_bonus_needs_more_than_three_cooks():
    three_times = make_dish_entity("Chili", times_cooked=3, last_made=days_ago(120, NOW))
    assert menu_weight(three_times, NOW) == pytest.approx(10 / 4 + 10)


def test_weekly_menu_keeps_small_collections():
    dishes = [make_dish_entity(name) for name in ("Laksa", "Paella")]
    assert weekly_menu(dishes, 7, random.Random(1), NOW) == dishes
    assert weekly_menu([], 7, random.Random(1), NOW) == []


def test_weekly_menu_draws_from_heaviest_dishes():
    stale = [make_dish_entity(f"Stale {n}") for n in range(6)]
    staples = [
        make_dish_entity(f"Staple {n}", times_cooked=9, last_made=days_ago(1, NOW))
        for n in range(4)
    ]

    # pool is max(2 * 2, 60% of 10) = 6 dishes, exactly the stale ones
    for seed in range(20):
        menu = weekly_menu(staples + stale, 2, random.Random(seed), NOW)
        assert len(menu) == 2
        assert len({dish.name for dish in menu}) == 2
        assert all(dish.name.startswith("Stale") for dish in menu)


def test_get_weekly_menu_uses_configured_size(db_session: Session, user_id):
    for n in range(9):
        make_dish(db_session, user_id, f"Dish {n}", ["Other"])
    make_dish(db_session, uuid.uuid4(), "Not Mine", ["Greek"])

    menu = SuggestionService.get_weekly_menu(db_session, user_id, rng=random.Random(5))

    assert len(menu) == 7
    assert all(dish.user_id == user_id for dish in menu)
    assert len(SuggestionService.get_weekly_menu(db_session, user_id, count=3)) == 3
