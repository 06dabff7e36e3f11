from __future__ import annotations

from datetime import timedelta

import pytest

from fixture_engine.activity import decay_weight, percentile, referee_overview, score, tier_for
from tests.utils import NOW, days_ago, make_fixture, make_official


def assigned(name, when, role="main", **kw):
    return make_fixture(when=when, **{role: name}, **kw)


# =========================================================================
# Percentiles and tiers
# =========================================================================


def test_percentile_interpolates_between_ranks():
    assert percentile([1.0, 2.0, 3.0, 4.0], 0.33) == pytest.approx(1.99)
    assert percentile([1.0, 3.0], 0.5) == pytest.approx(2.0)
    assert percentile([1.0, 2.0, 3.0], 0.5) == 2.0


def test_percentile_edge_sizes():
    assert percentile([], 0.33) == 0.0
    assert percentile([7.5], 0.66) == 7.5


@pytest.mark.parametrize("p", [0.33, 0.5, 0.66])
@pytest.mark.parametrize("n", range(2, 8))
def test_percentile_of_identical_values_is_exact(n, p):
    w = 0.5 ** (4 / 30)
    assert percentile([w] * n, p) == w


def test_tier_boundaries_are_inclusive():
    assert tier_for(1.0, 1.0, 2.0) == "low"
    assert tier_for(2.0, 1.0, 2.0) == "medium"
    assert tier_for(2.01, 1.0, 2.0) == "high"


def test_decay_halves_every_half_life():
    assert decay_weight(0, 30) == 1.0
    assert decay_weight(30, 30) == pytest.approx(0.5)
    assert decay_weight(60, 30) == pytest.approx(0.25)


# =========================================================================
# Scoring
# =========================================================================


class TestScore:
    def test_recent_work_outweighs_old_work(self):
        fixtures = [assigned("Ann Lee", days_ago(1)), assigned("Bob Ray", days_ago(10))]
        ranking = score(fixtures, NOW)
        assert [e.name for e in ranking] == ["Ann Lee", "Bob Ray"]
        assert ranking[0].weight > ranking[1].weight
        assert ranking[0].count == ranking[1].count == 1

    def test_weight_uses_fractional_age(self):
        ranking = score([assigned("Ann Lee", days_ago(15))], NOW)
        assert ranking[0].weight == pytest.approx(0.5 ** 0.5)

    def test_window_bounds(self):
        fixtures = [
            assigned("Edge", days_ago(30)),
            assigned("Too Old", days_ago(30) - timedelta(minutes=1)),
            assigned("Future", NOW + timedelta(minutes=1)),
            assigned("Broken", "TBD"),
        ]
        ranking = score(fixtures, NOW)
        assert [e.name for e in ranking] == ["Edge"]
        assert ranking[0].weight == pytest.approx(0.5)

    def test_all_roles_count(self):
        f = make_fixture(when=days_ago(2), main="Ann Lee", ar1="Bob Ray", ar2="Cat Day")
        assert {e.key for e in score([f], NOW)} == {"ann lee", "bob ray", "cat day"}

    def test_name_variants_merge(self):
        fixtures = [
            assigned("john smith", days_ago(1)),
            assigned(" John  Smith ", days_ago(2), role="ar1"),
            assigned("JOHN SMITH", days_ago(3), role="ar2"),
        ]
        (entry,) = score(fixtures, NOW)
        assert entry.key == "john smith"
        assert entry.count == 3
        assert entry.name[0].isupper()

    def test_capitalised_name_beats_lowercase_regardless_of_order(self):
        for names in (["ann lee", "Ann Lee"], ["Ann Lee", "ann lee"]):
            fixtures = [assigned(n, days_ago(i + 1)) for i, n in enumerate(names)]
            assert score(fixtures, NOW)[0].name == "Ann Lee"

    def test_first_image_is_kept(self):
        fixtures = [
            assigned({"name": "Ann Lee"}, days_ago(1)),
            assigned({"name": "Ann Lee", "image": "a.png"}, days_ago(2)),
            assigned({"name": "Ann Lee", "image": "b.png"}, days_ago(3)),
        ]
        assert score(fixtures, NOW)[0].image == "a.png"

    def test_nameless_official_keyed_by_id(self):
        (entry,) = score([assigned({"id": "u9"}, days_ago(1))], NOW)
        assert entry.key == "id:u9"
        assert entry.name == "Unnamed"

    @pytest.mark.parametrize("n", range(1, 8))
    def test_equal_weights_share_a_tier(self, n):
        when = days_ago(4)
        fixtures = [assigned(f"Ref {i}", when) for i in range(n)]
        tiers = {e.tier for e in score(fixtures, NOW)}
        assert tiers == {"low"}

    def test_tiers_split_at_percentiles(self):
        fixtures = []
        for count, name in enumerate(["A One", "B Two", "C Three", "D Four", "E Five"], start=1):
            fixtures.extend(assigned(name, NOW) for _ in range(count))
        by_name = {e.name: e for e in score(fixtures, NOW)}
        assert [by_name[n].tier for n in ("A One", "B Two", "C Three", "D Four", "E Five")] == [
            "low",
            "low",
            "medium",
            "high",
            "high",
        ]
        assert by_name["E Five"].weight == pytest.approx(5.0)

    def test_sorted_and_truncated(self):
        fixtures = []
        for i in range(30):
            fixtures.append(assigned(f"Ref {i:02d}", days_ago(i * 0.5 + 0.1)))
        ranking = score(fixtures, NOW, top_n=24)
        assert len(ranking) == 24
        weights = [e.weight for e in ranking]
        assert weights == sorted(weights, reverse=True)
        assert ranking[0].name == "Ref 00"

    def test_ties_break_by_key(self):
        fixtures = [assigned(n, days_ago(1)) for n in ("Zed Ali", "Amy Bo")]
        assert [e.key for e in score(fixtures, NOW)] == ["amy bo", "zed ali"]

    def test_empty_input(self):
        assert score([], NOW) == []

    @pytest.mark.parametrize(
        "kwargs",
        [{"half_life_days": 0}, {"half_life_days": -1}, {"lookback_days": -1}, {"top_n": -1}],
    )
    def test_rejects_bad_parameters(self, kwargs):
        with pytest.raises(ValueError):
            score([], NOW, **kwargs)


# =========================================================================
# Overview
# =========================================================================


def test_referee_overview():
    officials = [
        make_official("Ann Lee"),
        make_official("Bob Ray", available=False),
        make_official("Cat Day"),
    ]
    fixtures = [
        make_fixture(when=days_ago(1), main="Ann Lee", ar1="Bob Ray"),
        make_fixture(when=days_ago(5), main="ann lee"),
        make_fixture(when=days_ago(45), main="Cat Day"),
    ]
    summary = referee_overview(officials, fixtures, NOW, leaderboard_size=1)
    assert summary.total == 3
    assert summary.available == 2
    assert summary.unavailable == 1
    assert summary.available_pct == 67
    assert summary.assignments == 3
    assert [(r.name, r.count) for r in summary.leaderboard] == [("Ann Lee", 2)]


def test_referee_overview_empty():
    summary = referee_overview([], [], NOW)
    assert summary.available_pct == 0
    assert summary.leaderboard == []
