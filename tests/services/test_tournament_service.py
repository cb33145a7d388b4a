import json

import pytest

from app.core.exceptions import NotFoundError, TournamentValidationError
from app.models.tournament_model import ScoringMode, SeedingMode
from app.services import tournament_service
from app.services.bracket_service import get_round_matches


PLAYERS = ["Ana", "Ben", "Cleo", "Dev"]


class TestCreateTournament:

    def test_create_tournament_success(self):
        tournament = tournament_service.create_tournament(
            name="  Office Smash  ", game="Super Smash Bros", scoring_mode=ScoringMode.BEST_OF,
            score_label="Games", target_score=2, seeding_mode=SeedingMode.SEEDED,
        )
        assert tournament.name == "Office Smash"
        assert tournament.is_started is False
        assert tournament.participants == []
        assert tournament.matches == []
        assert tournament.current_round == 1
        assert tournament.target_score == 2
        assert tournament.seeding_mode == SeedingMode.SEEDED

    def test_target_score_is_dropped_outside_best_of(self):
        tournament = tournament_service.create_tournament(
            name="Kill Race", game="Apex Legends", scoring_mode=ScoringMode.HIGHER_SCORE,
            score_label="Kills", target_score=5,
        )
        assert tournament.target_score is None

    @pytest.mark.parametrize("name", ["", "   ", "X", "Y" * 101])
    def test_invalid_tournament_name(self, name):
        with pytest.raises(TournamentValidationError):
            tournament_service.create_tournament(name, "Chess", ScoringMode.BEST_OF, "Games")

    def test_create_from_game_uses_preset(self):
        tournament = tournament_service.create_tournament_from_game("Ranked Night", "Valorant")
        assert tournament.scoring_mode == ScoringMode.BEST_OF
        assert tournament.score_label == "Rounds"
        assert tournament.target_score == 13

    def test_create_from_unknown_game_uses_custom_preset(self):
        tournament = tournament_service.create_tournament_from_game("Garage Cup", "Foosball")
        assert tournament.game == "Foosball"
        assert tournament.scoring_mode == ScoringMode.HIGHER_SCORE
        assert tournament.score_label == "Points"


class TestSettings:

    def test_update_before_start(self, make_tournament):
        tournament = make_tournament(PLAYERS)
        updated = tournament_service.update_tournament_settings(
            tournament, ScoringMode.BEST_OF, target_score=4, seeding_mode=SeedingMode.SEEDED,
        )
        assert updated.scoring_mode == ScoringMode.BEST_OF
        assert updated.target_score == 4
        assert updated.seeding_mode == SeedingMode.SEEDED
        assert tournament.scoring_mode == ScoringMode.HIGHER_SCORE

    def test_settings_are_locked_after_start(self, started_tournament):
        tournament = started_tournament(PLAYERS)
        with pytest.raises(TournamentValidationError):
            tournament_service.update_tournament_settings(tournament, ScoringMode.LOWER_SCORE)


class TestRoster:

    def test_add_participant_updates_total_rounds(self, make_tournament):
        tournament = make_tournament(PLAYERS)
        bigger = tournament_service.add_participant(tournament, "  Eve ")

        assert [p.name for p in bigger.participants] == PLAYERS + ["Eve"]
        assert bigger.total_rounds == 3
        assert len(tournament.participants) == 4

    def test_duplicate_names_are_case_insensitive(self, make_tournament):
        tournament = make_tournament(PLAYERS)
        with pytest.raises(TournamentValidationError, match="already exists"):
            tournament_service.add_participant(tournament, "ana")

    def test_roster_is_locked_after_start(self, started_tournament):
        tournament = started_tournament(PLAYERS)
        with pytest.raises(TournamentValidationError):
            tournament_service.add_participant(tournament, "Eve")
        with pytest.raises(TournamentValidationError):
            tournament_service.remove_participant(tournament, tournament.participants[0].id)

    def test_rename_is_allowed_after_start(self, started_tournament):
        tournament = started_tournament(PLAYERS)
        ana = tournament.participants[0]
        renamed = tournament_service.rename_participant(tournament, ana.id, "Anastasia")
        assert renamed.get_participant(ana.id).name == "Anastasia"

    def test_rename_to_own_name_in_other_case(self, make_tournament):
        tournament = make_tournament(PLAYERS)
        ben = tournament.participants[1]
        renamed = tournament_service.rename_participant(tournament, ben.id, "BEN")
        assert renamed.get_participant(ben.id).name == "BEN"

    def test_remove_participant(self, make_tournament):
        tournament = make_tournament(PLAYERS)
        removed = tournament_service.remove_participant(tournament, tournament.participants[0].id)
        assert [p.name for p in removed.participants] == PLAYERS[1:]
        assert removed.total_rounds == 2

    def test_unknown_participant(self, make_tournament):
        tournament = make_tournament(PLAYERS)
        with pytest.raises(NotFoundError):
            tournament_service.rename_participant(tournament, "missing", "Zed")


class TestStartAndScore:

    def test_start_requires_two_participants(self, make_tournament):
        with pytest.raises(TournamentValidationError):
            tournament_service.start_tournament(make_tournament(["Solo"]))

    def test_start_twice_is_rejected(self, started_tournament):
        tournament = started_tournament(PLAYERS)
        with pytest.raises(TournamentValidationError):
            tournament_service.start_tournament(tournament)

    def test_start_builds_bracket(self, started_tournament):
        tournament = started_tournament(PLAYERS)
        assert tournament.is_started
        assert tournament.total_rounds == 2
        assert len(tournament.matches) == 3

    def test_score_sets_winner_and_game_points(self, started_tournament):
        tournament = started_tournament(PLAYERS)
        match = get_round_matches(tournament, 1)[0]
        scored = tournament_service.score_match(tournament, match.id, 21, 17)

        scored_match = scored.get_match(match.id)
        assert scored_match.winner_id == match.participant1_id
        assert scored.get_participant(match.participant1_id).game_points == 21
        assert scored.get_participant(match.participant2_id).game_points == 17
        assert tournament.get_match(match.id).winner_id is None

    def test_score_unknown_match(self, started_tournament):
        with pytest.raises(NotFoundError):
            tournament_service.score_match(started_tournament(PLAYERS), "nope", 1, 0)

    def test_negative_scores_are_rejected(self, started_tournament):
        tournament = started_tournament(PLAYERS)
        match = get_round_matches(tournament, 1)[0]
        with pytest.raises(TournamentValidationError):
            tournament_service.score_match(tournament, match.id, -1, 3)

    def test_scoring_a_match_without_two_occupants_is_a_no_op(self, started_tournament):
        tournament = started_tournament(PLAYERS)
        final = get_round_matches(tournament, 2)[0]
        assert tournament_service.score_match(tournament, final.id, 3, 1) is tournament

    def test_finalize_unready_round_returns_input(self, started_tournament):
        tournament = started_tournament(PLAYERS)
        assert tournament_service.finalize_tournament_round(tournament, 1) is tournament


class TestCorrectingFinalizedRound:

    @pytest.fixture
    def after_round_one(self, started_tournament, play):
        tournament = started_tournament(PLAYERS)
        tournament = play(tournament, 1, 1, 10, 5)
        tournament = play(tournament, 1, 2, 8, 3)
        return tournament_service.finalize_tournament_round(tournament, 1)

    def test_correction_repropagates_winner(self, after_round_one, play):
        first_match = get_round_matches(after_round_one, 1)[0]
        corrected = play(after_round_one, 1, 1, 5, 10)

        final = get_round_matches(corrected, 2)[0]
        assert final.participant1_id == first_match.participant2_id
        assert corrected.finalized_rounds == [1]
        assert corrected.current_round == 2

    def test_correction_must_keep_a_winner(self, after_round_one, play):
        with pytest.raises(TournamentValidationError):
            play(after_round_one, 1, 1, 7, 7)

    def test_correction_locked_once_next_round_begins(self, after_round_one, play):
        tournament = play(after_round_one, 2, 1, 2, 1)
        with pytest.raises(TournamentValidationError, match="locked"):
            play(tournament, 1, 1, 5, 10)


class TestResetAndChampion:

    def test_full_run_then_reset(self, started_tournament, play):
        tournament = started_tournament(PLAYERS)
        tournament = play(tournament, 1, 1, 10, 5)
        tournament = play(tournament, 1, 2, 8, 3)
        tournament = tournament_service.finalize_tournament_round(tournament, 1)
        tournament = play(tournament, 2, 1, 15, 10)
        tournament = tournament_service.finalize_tournament_round(tournament, 2)

        champion = tournament_service.get_champion(tournament)
        assert champion is not None
        assert champion.id == get_round_matches(tournament, 2)[0].participant1_id

        reset = tournament_service.reset_tournament(tournament)
        assert reset.matches == []
        assert reset.finalized_rounds == []
        assert reset.is_started is False
        assert reset.current_round == 1
        assert reset.total_rounds == 2
        assert all(p.game_points == 0 for p in reset.participants)
        assert [(p.id, p.name) for p in reset.participants] == [(p.id, p.name) for p in tournament.participants]

    def test_no_champion_before_final(self, started_tournament):
        assert tournament_service.get_champion(started_tournament(PLAYERS)) is None


class TestExportImport:

    def test_export_then_import_keeps_the_bracket(self, started_tournament, play):
        tournament = play(started_tournament(PLAYERS), 1, 1, 4, 2)
        exported = tournament_service.export_tournaments([tournament])
        assert isinstance(json.loads(exported), list)

        imported = tournament_service.import_tournaments(exported)
        assert len(imported) == 1
        assert imported[0].id == tournament.id
        assert [m.model_dump() for m in imported[0].matches] == [m.model_dump() for m in tournament.matches]

    def test_import_rejects_non_array(self):
        with pytest.raises(TournamentValidationError, match="expected an array"):
            tournament_service.import_tournaments('{"id": "t1"}')

    def test_import_rejects_malformed_json(self):
        with pytest.raises(TournamentValidationError):
            tournament_service.import_tournaments("[{")

    def test_import_names_the_bad_record(self):
        records = [{"id": "t1", "name": "Cup", "game": "Chess"}, {"id": "t2", "name": "No Game"}]
        with pytest.raises(TournamentValidationError, match="index 1"):
            tournament_service.parse_tournament_records(records)

    def test_import_normalizes_missing_flags(self):
        records = [
            {"id": "t1", "name": "Old Cup", "game": "Chess"},
            {"id": "t2", "name": "Old Run", "game": "Chess",
             "matches": [{"round_number": 1, "position": 1}], "finalized_rounds": None},
        ]
        fresh, running = tournament_service.parse_tournament_records(records)
        assert fresh.is_started is False
        assert running.is_started is True
        assert running.finalized_rounds == []
