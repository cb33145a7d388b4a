from typing import List

from app.core.exceptions import TournamentValidationError
from app.models.tournament_model import ParticipantModel, ParticipantStatus, TournamentModel

PARTICIPANT_NAME_MIN = 2
PARTICIPANT_NAME_MAX = 50
TOURNAMENT_NAME_MIN = 2
TOURNAMENT_NAME_MAX = 100


def validate_participant_name(name: str, existing_participants: List[ParticipantModel]) -> str:
    """
    Returns the trimmed name, or raises TournamentValidationError with a readable reason.
    Uniqueness is case-insensitive.
    """
    trimmed_name = (name or "").strip()

    if not trimmed_name:
        raise TournamentValidationError("Name cannot be empty")
    if len(trimmed_name) < PARTICIPANT_NAME_MIN:
        raise TournamentValidationError(f"Name must be at least {PARTICIPANT_NAME_MIN} characters")
    if len(trimmed_name) > PARTICIPANT_NAME_MAX:
        raise TournamentValidationError(f"Name must be at most {PARTICIPANT_NAME_MAX} characters")

    lowered = trimmed_name.lower()
    if any(p.name.lower() == lowered for p in existing_participants):
        raise TournamentValidationError("A participant with this name already exists")

    return trimmed_name


def validate_tournament_name(name: str) -> str:
    trimmed_name = (name or "").strip()

    if not trimmed_name:
        raise TournamentValidationError("Tournament name cannot be empty")
    if len(trimmed_name) < TOURNAMENT_NAME_MIN:
        raise TournamentValidationError(f"Tournament name must be at least {TOURNAMENT_NAME_MIN} characters")
    if len(trimmed_name) > TOURNAMENT_NAME_MAX:
        raise TournamentValidationError(f"Tournament name must be at most {TOURNAMENT_NAME_MAX} characters")

    return trimmed_name


def _holds_wild_card(match, participant_id: str) -> bool:
    return (
        (match.participant1_id == participant_id and match.wild_card_participant1)
        or (match.participant2_id == participant_id and match.wild_card_participant2)
    )


def get_participant_status(participant: ParticipantModel, tournament: TournamentModel) -> ParticipantStatus:
    """
    Where a participant stands in the bracket.

    Losing any two-occupant match eliminates. Otherwise the current round decides:
    a decided win is `advanced`, a regular match is `playing`, and sitting alone
    (an auto-won bye) or in a wild-card slot is `bye`.
    """
    participant_matches = [m for m in tournament.matches if m.has_participant(participant.id)]

    final_match = next(
        (m for m in tournament.matches if m.round_number == tournament.total_rounds),
        None,
    )
    if final_match and final_match.winner_id == participant.id:
        return ParticipantStatus.CHAMPION

    if any(m.is_full and m.winner_id and m.winner_id != participant.id for m in participant_matches):
        return ParticipantStatus.ELIMINATED

    current_match = next(
        (m for m in participant_matches if m.round_number == tournament.current_round),
        None,
    )
    if current_match:
        if current_match.is_full and current_match.winner_id == participant.id:
            return ParticipantStatus.ADVANCED
        if current_match.is_full and not _holds_wild_card(current_match, participant.id):
            return ParticipantStatus.PLAYING
        return ParticipantStatus.BYE

    return ParticipantStatus.WAITING
