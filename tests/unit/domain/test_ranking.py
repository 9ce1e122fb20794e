"""
Unit Tests for Rankings
=======================

Test Coverage
-------------
- Ordering by score with player-id tie break
- Rank movement against the previous rank and snapshots
- Paging and lazy top-n iteration
- Removal and category validation
- Concurrent writers from several threads
"""

import random
import threading

import pytest

from voidcore.domain.exceptions import InvalidArgumentError, NotFoundError
from voidcore.domain.models.ranking import RankingService, validate_category


@pytest.fixture
def rankings() -> RankingService:
    service = RankingService()
    service.upsert("level", "alice", 9850)
    service.upsert("level", "bob", 9720)
    service.upsert("level", "carol", 9500)
    return service


@pytest.mark.unit
@pytest.mark.domain
class TestOrdering:
    """Test the total order of a board."""

    def test_ranks_follow_score_descending(self, rankings):
        assert [e.player_id for e in rankings.top_n("level", 10)] == ["alice", "bob", "carol"]
        assert rankings.rank_of("level", "bob").rank == 2

    def test_ties_broken_by_player_id(self):
        # Arrange
        service = RankingService()
        for player in ("zed", "amy", "kim"):
            service.upsert("pvp", player, 100)

        # Act
        order = [e.player_id for e in service.top_n("pvp", 3)]

        # Assert
        assert order == ["amy", "kim", "zed"]

    def test_ranks_are_a_permutation(self):
        # Arrange
        service = RankingService()
        rng = random.Random(7)
        for i in range(200):
            service.upsert("quests", f"p{i:03d}", rng.randint(0, 50))

        # Act
        ranks = sorted(service.rank_of("quests", f"p{i:03d}").rank for i in range(200))

        # Assert
        assert ranks == list(range(1, 201))

    def test_update_replaces_score(self, rankings):
        rankings.upsert("level", "carol", 10000)

        assert rankings.rank_of("level", "carol").rank == 1
        assert rankings.size("level") == 3

    def test_float_scores(self):
        service = RankingService()
        service.upsert("wealth", "a", 10.5)
        service.upsert("wealth", "b", 10.25)

        assert service.rank_of("wealth", "a").score == 10.5

    @pytest.mark.parametrize("bad", ["12", None, True, float("nan")])
    def test_invalid_score_rejected(self, rankings, bad):
        with pytest.raises(InvalidArgumentError):
            rankings.upsert("level", "dave", bad)


@pytest.mark.unit
@pytest.mark.domain
class TestRankMovement:
    """Test the change field."""

    def test_new_player_has_no_movement(self, rankings):
        assert rankings.rank_of("level", "alice").change == 0

    def test_climb_is_positive(self, rankings):
        # Act
        rankings.upsert("level", "carol", 9900)
        snapshot = rankings.rank_of("level", "carol")

        # Assert
        assert snapshot.rank == 1
        assert snapshot.change == 2

    def test_fall_is_negative(self, rankings):
        rankings.upsert("level", "alice", 1)

        assert rankings.rank_of("level", "alice").change == -2

    def test_snapshot_rebases_movement(self, rankings):
        # Arrange
        rankings.upsert("level", "carol", 9900)

        # Act
        rankings.snapshot("level")

        # Assert
        assert rankings.rank_of("level", "carol").change == 0
        assert rankings.rank_of("level", "alice").change == 0

    def test_to_dict_shape(self, rankings):
        assert rankings.rank_of("level", "bob").to_dict() == {
            "rank": 2,
            "value": 9720,
            "change": 0,
            "category": "level",
        }


@pytest.mark.unit
@pytest.mark.domain
class TestQueries:
    """Test paging, top-n and lookups."""

    def test_page_window(self, rankings):
        page = rankings.page("level", 1, 5)

        assert [entry.to_dict() for entry in page] == [
            {"rank": 2, "userId": "bob", "value": 9720, "change": 0, "category": "level"},
            {"rank": 3, "userId": "carol", "value": 9500, "change": 0, "category": "level"},
        ]

    def test_page_rows_report_movement(self, rankings):
        # Arrange
        rankings.snapshot("level")

        # Act
        rankings.upsert("level", "carol", 9900)

        # Assert
        assert [(e.player_id, e.change) for e in rankings.top_n("level", 3)] == [
            ("carol", 2),
            ("alice", -1),
            ("bob", -1),
        ]

    def test_large_board_matches_full_sort(self):
        # Arrange
        rng = random.Random(7)
        service = RankingService()
        scores = {}

        # Act
        for _ in range(20000):
            player_id = f"p{rng.randrange(3000)}"
            scores[player_id] = rng.randrange(1000)
            service.upsert("wealth", player_id, scores[player_id])

        # Assert
        expected = sorted(scores, key=lambda p: (-scores[p], p))
        assert [e.player_id for e in service.top_n("wealth", len(expected))] == expected
        assert service.rank_of("wealth", expected[1234]).rank == 1235

    def test_page_past_end_is_empty(self, rankings):
        assert rankings.page("level", 10, 5) == []

    def test_unknown_category_is_empty(self, rankings):
        assert list(rankings.top_n("pve", 5)) == []
        assert rankings.size("pve") == 0

    def test_top_n_is_a_stable_copy(self, rankings):
        """Writes after iteration starts do not change the yielded entries."""
        # Arrange
        iterator = rankings.top_n("level", 3)
        first = next(iterator)

        # Act
        rankings.upsert("level", "zoe", 99999)
        rest = [entry.player_id for entry in iterator]

        # Assert
        assert first.player_id == "alice"
        assert rest == ["bob", "carol"]

    def test_negative_paging_rejected(self, rankings):
        with pytest.raises(InvalidArgumentError):
            rankings.page("level", -1, 10)

    def test_unranked_player_not_found(self, rankings):
        with pytest.raises(NotFoundError):
            rankings.rank_of("level", "nobody")

    def test_unknown_category_not_found(self, rankings):
        with pytest.raises(NotFoundError):
            rankings.rank_of("casino-wins", "alice")


@pytest.mark.unit
@pytest.mark.domain
class TestRemoval:
    """Test removing players."""

    def test_remove_closes_gap(self, rankings):
        assert rankings.remove("level", "alice") is True

        assert rankings.rank_of("level", "bob").rank == 1
        assert rankings.remove("level", "alice") is False

    def test_remove_player_from_all_boards(self, rankings):
        rankings.upsert("pvp", "alice", 3)

        assert rankings.remove_player("alice") == 2
        assert rankings.categories() == ["level"]


@pytest.mark.unit
@pytest.mark.domain
class TestCategoryValidation:
    """Test category names."""

    @pytest.mark.parametrize("name", ["level", "casino-wins", "season_3", "x"])
    def test_valid_names(self, name):
        assert validate_category(name) == name

    @pytest.mark.parametrize("name", ["", "Level", "-level", "a b", "x" * 51, None])
    def test_malformed_names_rejected(self, name):
        with pytest.raises(InvalidArgumentError):
            validate_category(name)


@pytest.mark.unit
@pytest.mark.domain
class TestConcurrentWriters:
    """Test upserts from several threads."""

    def test_every_write_lands(self):
        # Arrange
        service = RankingService()

        def writer(offset: int) -> None:
            for i in range(250):
                service.upsert("social", f"t{offset}-{i}", i)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]

        # Act
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        # Assert
        assert service.size("social") == 1000
        top = list(service.top_n("social", 4))
        assert [entry.score for entry in top] == [249, 249, 249, 249]
