"""
Operations on a whole tournament aggregate.

Each function takes a TournamentModel and returns a fresh one, so callers can
treat "load, apply, persist" as one unit. Validation problems and unknown ids
raise; a precondition that is simply not met yet (a match without two
occupants, a round that cannot be finalized) returns the input unchanged.
"""
import json
import logging
import random
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from app.core.config import settings
from app.core.exceptions import NotFoundError, TournamentValidationError
from app.models.tournament_model import (
    ParticipantModel,
    ScoringMode,
    SeedingMode,
    TournamentModel,
    utc_now,
)
from app.services import bracket_service, scoring_service
from app.services.participant_service import validate_participant_name, validate_tournament_name

logger = logging.getLogger(__name__)


def _touch(tournament: TournamentModel) -> TournamentModel:
    tournament.updated_at = utc_now()
    return tournament


def _ensure_not_started(tournament: TournamentModel, action: str):
    if tournament.is_started:
        raise TournamentValidationError(f"Cannot {action} after the tournament has started")


def _clean_target_score(scoring_mode: ScoringMode, target_score: Optional[int]) -> Optional[int]:
    if scoring_mode != ScoringMode.BEST_OF:
        return None
    if target_score is not None and target_score < 1:
        raise TournamentValidationError("Target score must be at least 1")
    return target_score


def create_tournament(
    name: str,
    game: str,
    scoring_mode: ScoringMode,
    score_label: str,
    target_score: Optional[int] = None,
    seeding_mode: Optional[SeedingMode] = None,
) -> TournamentModel:
    """Creates an empty, unstarted tournament."""
    trimmed_name = validate_tournament_name(name)
    if not (game or "").strip():
        raise TournamentValidationError("Game cannot be empty")

    mode = ScoringMode(scoring_mode)
    tournament = TournamentModel(
        name=trimmed_name,
        game=game.strip(),
        scoring_mode=mode,
        score_label=(score_label or "").strip() or "Points",
        target_score=_clean_target_score(mode, target_score),
        seeding_mode=SeedingMode(seeding_mode or settings.DEFAULT_SEEDING_MODE),
    )
    logger.info("Created tournament %s (%s, %s)", tournament.id, tournament.game, mode.value)
    return tournament


def create_tournament_from_game(
    name: str,
    game: str,
    seeding_mode: Optional[SeedingMode] = None,
) -> TournamentModel:
    """Creates a tournament using the scoring preset of a known game title."""
    rule = scoring_service.get_game_rule(game)
    return create_tournament(
        name=name,
        game=game,
        scoring_mode=rule.scoring_mode,
        score_label=rule.score_label,
        target_score=rule.target_score,
        seeding_mode=seeding_mode,
    )


def update_tournament_settings(
    tournament: TournamentModel,
    scoring_mode: ScoringMode,
    target_score: Optional[int] = None,
    seeding_mode: Optional[SeedingMode] = None,
) -> TournamentModel:
    _ensure_not_started(tournament, "change scoring settings")

    working = tournament.model_copy(deep=True)
    working.scoring_mode = ScoringMode(scoring_mode)
    working.target_score = _clean_target_score(working.scoring_mode, target_score)
    if seeding_mode is not None:
        working.seeding_mode = SeedingMode(seeding_mode)
    return _touch(working)


# --- Roster ---

def _find_participant(tournament: TournamentModel, participant_id: str) -> ParticipantModel:
    participant = tournament.get_participant(participant_id)
    if participant is None:
        raise NotFoundError(f"Participant {participant_id} not found")
    return participant


def add_participant(tournament: TournamentModel, name: str) -> TournamentModel:
    _ensure_not_started(tournament, "add participants")
    trimmed_name = validate_participant_name(name, tournament.participants)

    working = tournament.model_copy(deep=True)
    working.participants.append(ParticipantModel(name=trimmed_name))
    working.total_rounds = bracket_service.calculate_total_rounds(len(working.participants))
    return _touch(working)


def rename_participant(tournament: TournamentModel, participant_id: str, name: str) -> TournamentModel:
    """Renaming is allowed at any time; matches refer to participants by id."""
    _find_participant(tournament, participant_id)
    others = [p for p in tournament.participants if p.id != participant_id]
    trimmed_name = validate_participant_name(name, others)

    working = tournament.model_copy(deep=True)
    working.get_participant(participant_id).name = trimmed_name
    return _touch(working)


def remove_participant(tournament: TournamentModel, participant_id: str) -> TournamentModel:
    _ensure_not_started(tournament, "remove participants")
    _find_participant(tournament, participant_id)

    working = tournament.model_copy(deep=True)
    working.participants = [p for p in working.participants if p.id != participant_id]
    working.matches = []
    working.current_round = 1
    working.total_rounds = bracket_service.calculate_total_rounds(len(working.participants))
    return _touch(working)


# --- Lifecycle ---

def start_tournament(tournament: TournamentModel, rng: Optional[random.Random] = None) -> TournamentModel:
    _ensure_not_started(tournament, "start the tournament again")
    if len(tournament.participants) < 2:
        raise TournamentValidationError("At least 2 participants are required to start")

    started = bracket_service.assign_participants_to_matches(tournament, rng=rng)
    started.is_started = True
    logger.info("Started tournament %s with %d participants over %d rounds",
                started.id, len(started.participants), started.total_rounds)
    return _touch(started)


def score_match(
    tournament: TournamentModel,
    match_id: str,
    participant1_score: int,
    participant2_score: int,
) -> TournamentModel:
    """
    Records the scores of a match and the winner they imply.

    Each side's score becomes that participant's game points. Correcting a
    match in a round that was already finalized re-propagates the round,
    as long as the next round has not begun.
    """
    match = tournament.get_match(match_id)
    if match is None:
        raise NotFoundError(f"Match {match_id} not found")
    if participant1_score < 0 or participant2_score < 0:
        raise TournamentValidationError("Scores cannot be negative")
    if not match.is_full:
        return tournament

    round_number = match.round_number
    was_finalized = round_number in tournament.finalized_rounds
    winner_id = scoring_service.determine_winner(tournament, match, participant1_score, participant2_score)

    if was_finalized:
        next_round = bracket_service.get_round_matches(tournament, round_number + 1)
        if bracket_service.round_has_begun(next_round):
            raise TournamentValidationError(
                f"Round {round_number} is locked because round {round_number + 1} has already begun"
            )
        if winner_id is None:
            raise TournamentValidationError(
                f"Round {round_number} is finalized, its matches must keep a winner"
            )

    working = tournament.model_copy(deep=True)
    working_match = working.get_match(match_id)
    working_match.participant1_score = participant1_score
    working_match.participant2_score = participant2_score
    working_match.winner_id = winner_id

    working.get_participant(working_match.participant1_id).game_points = participant1_score
    working.get_participant(working_match.participant2_id).game_points = participant2_score

    if was_finalized:
        working, _ = bracket_service.finalize_round(working, round_number)

    return _touch(working)


def finalize_tournament_round(tournament: TournamentModel, round_number: int) -> TournamentModel:
    finalized, did_finalize = bracket_service.finalize_round(tournament, round_number)
    if not did_finalize:
        logger.info("Round %d of tournament %s is not ready to finalize", round_number, tournament.id)
        return tournament

    logger.info("Finalized round %d of tournament %s", round_number, tournament.id)
    return _touch(finalized)


def reset_tournament(tournament: TournamentModel) -> TournamentModel:
    """Back to the pre-start state with the same roster and zeroed game points."""
    working = tournament.model_copy(deep=True)
    for participant in working.participants:
        participant.game_points = 0

    working.is_started = False
    working.matches = []
    working.current_round = 1
    working.total_rounds = bracket_service.calculate_total_rounds(len(working.participants))
    working.finalized_rounds = []
    logger.info("Reset tournament %s", working.id)
    return _touch(working)


def get_champion(tournament: TournamentModel) -> Optional[ParticipantModel]:
    final = bracket_service.get_round_matches(tournament, tournament.total_rounds)
    if not final or not final[0].winner_id:
        return None
    return tournament.get_participant(final[0].winner_id)


# --- Export / import ---

def export_tournaments(tournaments: Iterable[TournamentModel]) -> str:
    return json.dumps([t.model_dump(mode="json") for t in tournaments], indent=2)


def _normalize_record(record: Dict[str, Any]) -> Dict[str, Any]:
    normalized = dict(record)
    if normalized.get("is_started") is None:
        normalized["is_started"] = len(normalized.get("matches") or []) > 0
    if normalized.get("finalized_rounds") is None:
        normalized["finalized_rounds"] = []
    normalized["updated_at"] = utc_now()
    return normalized


def parse_tournament_records(records: Any) -> List[TournamentModel]:
    """Validates a decoded JSON array of tournament records."""
    if not isinstance(records, list):
        raise TournamentValidationError("Invalid format: expected an array of tournaments")

    tournaments = []
    for index, record in enumerate(records):
        if not isinstance(record, dict) or not all(record.get(key) for key in ("id", "name", "game")):
            raise TournamentValidationError(f"Invalid tournament at index {index}")
        try:
            tournaments.append(TournamentModel.model_validate(_normalize_record(record)))
        except ValidationError as e:
            raise TournamentValidationError(f"Invalid tournament at index {index}: {e}") from e
    return tournaments


def import_tournaments(json_string: str) -> List[TournamentModel]:
    try:
        records = json.loads(json_string)
    except json.JSONDecodeError as e:
        raise TournamentValidationError(f"Failed to parse tournaments: {e}") from e
    return parse_tournament_records(records)
