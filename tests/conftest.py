import random

import pytest

from app.models.tournament_model import ScoringMode, SeedingMode, TournamentModel
from app.services import bracket_service, tournament_service


@pytest.fixture
def make_tournament():
    """Factory for an unstarted tournament with the given roster."""
    def _make(names, scoring_mode=ScoringMode.HIGHER_SCORE, seeding_mode=SeedingMode.RANDOM, target_score=None):
        tournament = tournament_service.create_tournament(
            name="Friday Night Bracket",
            game="Custom Game",
            scoring_mode=scoring_mode,
            score_label="Points",
            target_score=target_score,
            seeding_mode=seeding_mode,
        )
        for name in names:
            tournament = tournament_service.add_participant(tournament, name)
        return tournament
    return _make


@pytest.fixture
def started_tournament(make_tournament):
    """Factory for a started tournament, seeded reproducibly."""
    def _start(names, seed=7, **kwargs):
        tournament = make_tournament(names, **kwargs)
        return tournament_service.start_tournament(tournament, rng=random.Random(seed))
    return _start


@pytest.fixture
def play():
    """Scores the match at (round_number, position) and returns the new tournament."""
    def _play(tournament: TournamentModel, round_number: int, position: int, score1: int, score2: int):
        match = bracket_service.get_round_matches(tournament, round_number)[position - 1]
        return tournament_service.score_match(tournament, match.id, score1, score2)
    return _play
