"""
Single elimination bracket engine.

Builds the match skeleton for any participant count, seeds round 1, and
finalizes rounds: winners move forward, byes are auto-won, and empty seats
left in the next round are backfilled with the best eliminated players
("wild cards").

Every public function takes a TournamentModel and returns a new one; the
input is never mutated.
"""
import logging
import random
from typing import List, Optional, Tuple

from app.models.bracket_model import MatchModel
from app.models.tournament_model import (
    ParticipantModel,
    ScoringMode,
    SeedingMode,
    TournamentModel,
)

logger = logging.getLogger(__name__)


def calculate_total_rounds(participant_count: int) -> int:
    """ceil(log2(participant_count)), or 0 when fewer than 2 participants."""
    if participant_count < 2:
        return 0
    return (participant_count - 1).bit_length()


def calculate_bracket_size(participant_count: int) -> int:
    """Next power of two >= participant_count (0 when fewer than 2 participants)."""
    total_rounds = calculate_total_rounds(participant_count)
    return 2 ** total_rounds if total_rounds else 0


def generate_match_structure(participant_count: int) -> List[MatchModel]:
    """
    Creates the empty match tree for a single elimination bracket.
    Round r holds 2^(rounds - r) matches, the last round holds the final.
    """
    num_rounds = calculate_total_rounds(participant_count)
    matches: List[MatchModel] = []

    for round_number in range(1, num_rounds + 1):
        matches_in_round = 2 ** (num_rounds - round_number)
        for position in range(1, matches_in_round + 1):
            matches.append(MatchModel(round_number=round_number, position=position))

    logger.debug("Built bracket skeleton: %d participants, %d rounds, %d matches",
                 participant_count, num_rounds, len(matches))
    return matches


def generate_seed_order(bracket_size: int) -> List[int]:
    """
    Standard bracket order of 0-based seeds, so top seeds meet as late as possible.

    For 8 slots: [0, 7, 3, 4, 1, 6, 2, 5] -> 1v8, 4v5, 2v7, 3v6 in 1-based seeds.
    """
    if bracket_size <= 2:
        return [0, 1]

    upper_half = generate_seed_order(bracket_size // 2)
    order = []
    for seed in upper_half:
        order.extend([seed, bracket_size - 1 - seed])
    return order


def rank_participants(participants: List[ParticipantModel]) -> List[ParticipantModel]:
    """Ranking order: most game points first, ties broken by name."""
    return sorted(participants, key=lambda p: (-p.game_points, p.name))


def _place(match: MatchModel, slot: int, participant_id: str):
    if slot == 1:
        match.participant1_id = participant_id
    else:
        match.participant2_id = participant_id


def _place_randomly(first_round: List[MatchModel], participants: List[ParticipantModel], rng) -> None:
    shuffled = list(participants)
    rng.shuffle(shuffled) # Fisher-Yates
    # Fill match by match, slot 1 then slot 2; leftover slots stay empty (byes)
    for index, participant in enumerate(shuffled):
        _place(first_round[index // 2], index % 2 + 1, participant.id)


def _place_by_seed(first_round: List[MatchModel], participants: List[ParticipantModel]) -> None:
    ranked = rank_participants(participants)
    bracket_size = len(first_round) * 2
    for slot_index, seed in enumerate(generate_seed_order(bracket_size)):
        # Seeds past the field are simply absent, which hands byes to the top seeds
        if seed < len(ranked):
            _place(first_round[slot_index // 2], slot_index % 2 + 1, ranked[seed].id)


def assign_participants_to_matches(
    tournament: TournamentModel,
    rng: Optional[random.Random] = None,
) -> TournamentModel:
    """
    Builds the bracket and seeds round 1 according to the tournament's seeding mode.
    Pass `rng` (a random.Random) for reproducible random seeding.
    """
    working = tournament.model_copy(deep=True)
    participant_count = len(working.participants)

    working.current_round = 1
    working.finalized_rounds = []

    if participant_count < 2:
        working.matches = []
        working.total_rounds = 0
        return working

    matches = generate_match_structure(participant_count)
    first_round = [m for m in matches if m.round_number == 1]

    if SeedingMode(working.seeding_mode) == SeedingMode.SEEDED:
        _place_by_seed(first_round, working.participants)
    else:
        _place_randomly(first_round, working.participants, rng or random)

    working.matches = matches
    working.total_rounds = calculate_total_rounds(participant_count)
    logger.debug("Seeded tournament %s (%s): %d participants into %d round-1 matches",
                 working.id, SeedingMode(working.seeding_mode).value, participant_count, len(first_round))
    return working


# --- Round queries ---

def get_round_matches(tournament: TournamentModel, round_number: int) -> List[MatchModel]:
    return sorted(
        (m for m in tournament.matches if m.round_number == round_number),
        key=lambda m: m.position,
    )


def get_bye_matches(tournament: TournamentModel, round_number: int) -> List[MatchModel]:
    return [m for m in get_round_matches(tournament, round_number) if m.is_bye]


def get_regular_matches(tournament: TournamentModel, round_number: int) -> List[MatchModel]:
    return [m for m in get_round_matches(tournament, round_number) if m.is_full]


def get_completed_matches(tournament: TournamentModel, round_number: int) -> List[MatchModel]:
    return [m for m in get_regular_matches(tournament, round_number) if m.winner_id]


def get_round_label(round_number: int, total_rounds: int) -> str:
    rounds_remaining = total_rounds - round_number
    if rounds_remaining == 0:
        return "Final"
    if rounds_remaining == 1:
        return "Semi-Finals"
    if rounds_remaining == 2:
        return "Quarter-Finals"
    return f"Round {round_number}"


def round_has_begun(matches: List[MatchModel]) -> bool:
    return any(m.winner_id or m.participant1_score or m.participant2_score for m in matches)


# --- Finalization ---

def can_finalize_round(tournament: TournamentModel, round_number: int) -> bool:
    if round_number < 1 or round_number > tournament.total_rounds:
        return False

    round_matches = get_round_matches(tournament, round_number)
    if not round_matches:
        return False
    if any(m.is_full and not m.winner_id for m in round_matches):
        return False

    # Re-finalizing after the next round has begun would overwrite its results
    if round_number < tournament.total_rounds:
        if round_has_begun(get_round_matches(tournament, round_number + 1)):
            return False
    return True


def _advance_winner(tournament: TournamentModel, match: MatchModel) -> None:
    next_position = (match.position + 1) // 2
    next_match = next(
        (m for m in get_round_matches(tournament, match.round_number + 1) if m.position == next_position),
        None,
    )
    if next_match is None:
        return
    # Odd positions feed slot 1, even positions feed slot 2
    _place(next_match, 1 if match.position % 2 == 1 else 2, match.winner_id)


def collect_wild_card_candidates(tournament: TournamentModel, round_number: int) -> List[Tuple[str, int]]:
    """
    Losers of the decided two-occupant matches in a round, best performers first.
    Returns (participant_id, score) pairs.
    """
    losers = [m.loser() for m in get_completed_matches(tournament, round_number)]
    losers = [loser for loser in losers if loser is not None]

    lower_is_better = ScoringMode(tournament.scoring_mode) == ScoringMode.LOWER_SCORE
    losers.sort(key=lambda loser: (
        loser[1] if lower_is_better else -loser[1],
        tournament.participant_name(loser[0]),
    ))
    return losers


def _fill_wild_cards(tournament: TournamentModel, round_number: int) -> List[str]:
    """Backfills single-occupant matches of the next round in place; returns the ids placed."""
    candidates = collect_wild_card_candidates(tournament, round_number)
    placed: List[str] = []

    for match in get_round_matches(tournament, round_number + 1):
        if not candidates:
            break
        if not match.is_bye or match.winner_id:
            continue

        participant_id, _ = candidates.pop(0)
        if not match.participant1_id:
            match.participant1_id = participant_id
            match.wild_card_participant1 = True
        else:
            match.participant2_id = participant_id
            match.wild_card_participant2 = True
        placed.append(participant_id)

    if placed:
        logger.debug("Tournament %s round %d: wild cards %s", tournament.id, round_number + 1, placed)
    return placed


def finalize_round(tournament: TournamentModel, round_number: int) -> Tuple[TournamentModel, bool]:
    """
    Locks in a round's results and propagates them into the next round.

    Returns (tournament, finalized). When the round cannot be finalized the
    input tournament is returned unchanged with finalized=False.
    """
    if not can_finalize_round(tournament, round_number):
        return tournament, False

    working = tournament.model_copy(deep=True)

    if round_number < working.total_rounds:
        # The next round is rebuilt from scratch every time
        for next_match in get_round_matches(working, round_number + 1):
            next_match.clear()

        round_matches = get_round_matches(working, round_number)
        for match in round_matches:
            if match.winner_id:
                _advance_winner(working, match)

        for match in round_matches:
            if match.is_bye and not match.winner_id:
                match.winner_id = match.occupant_ids[0]
                _advance_winner(working, match)

        _fill_wild_cards(working, round_number)

        if round_number == working.current_round:
            working.current_round += 1

    if round_number not in working.finalized_rounds:
        working.finalized_rounds = sorted(working.finalized_rounds + [round_number])

    logger.debug("Finalized round %d of tournament %s", round_number, working.id)
    return working, True
