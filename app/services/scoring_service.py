"""
Win determination for the three scoring modes, plus the game presets and
the human-readable match status lines that depend on them.
"""
from typing import Callable, Dict, Optional

from app.models.bracket_model import MatchModel
from app.models.tournament_model import GameRule, ScoringMode, TournamentModel

# Default preset for titles that are not in the catalogue
CUSTOM_GAME = "Custom Game"

GAME_RULES: Dict[str, GameRule] = {
    # Sports
    "NBA 2K": GameRule(scoring_mode=ScoringMode.HIGHER_SCORE, score_label="Points"),
    "Madden NFL": GameRule(scoring_mode=ScoringMode.HIGHER_SCORE, score_label="Points"),
    "EA FC (FIFA)": GameRule(scoring_mode=ScoringMode.HIGHER_SCORE, score_label="Goals"),
    "Rocket League": GameRule(scoring_mode=ScoringMode.HIGHER_SCORE, score_label="Goals"),
    "MLB The Show": GameRule(scoring_mode=ScoringMode.HIGHER_SCORE, score_label="Runs"),
    "NHL": GameRule(scoring_mode=ScoringMode.HIGHER_SCORE, score_label="Goals"),
    # Fighting / battle
    "Fortnite (Box Fights)": GameRule(scoring_mode=ScoringMode.BEST_OF, score_label="Rounds", target_score=3),
    "Fortnite (Kill Race)": GameRule(scoring_mode=ScoringMode.HIGHER_SCORE, score_label="Kills"),
    "Super Smash Bros": GameRule(scoring_mode=ScoringMode.BEST_OF, score_label="Games", target_score=2),
    "Mortal Kombat": GameRule(scoring_mode=ScoringMode.BEST_OF, score_label="Rounds", target_score=2),
    "Street Fighter": GameRule(scoring_mode=ScoringMode.BEST_OF, score_label="Rounds", target_score=2),
    "Tekken": GameRule(scoring_mode=ScoringMode.BEST_OF, score_label="Rounds", target_score=2),
    # Shooters
    "Call of Duty (1v1)": GameRule(scoring_mode=ScoringMode.HIGHER_SCORE, score_label="Kills"),
    "Call of Duty (Search)": GameRule(scoring_mode=ScoringMode.BEST_OF, score_label="Rounds", target_score=6),
    "Apex Legends": GameRule(scoring_mode=ScoringMode.HIGHER_SCORE, score_label="Kills"),
    "Valorant": GameRule(scoring_mode=ScoringMode.BEST_OF, score_label="Rounds", target_score=13),
    "Counter-Strike 2": GameRule(scoring_mode=ScoringMode.BEST_OF, score_label="Rounds", target_score=13),
    # Racing
    "Mario Kart": GameRule(scoring_mode=ScoringMode.LOWER_SCORE, score_label="Position"),
    "Gran Turismo": GameRule(scoring_mode=ScoringMode.LOWER_SCORE, score_label="Position"),
    "Forza": GameRule(scoring_mode=ScoringMode.LOWER_SCORE, score_label="Position"),
    # Other
    "Chess": GameRule(scoring_mode=ScoringMode.BEST_OF, score_label="Games", target_score=2),
    "Mario Party": GameRule(scoring_mode=ScoringMode.HIGHER_SCORE, score_label="Stars"),
    "Tetris": GameRule(scoring_mode=ScoringMode.HIGHER_SCORE, score_label="Points"),
    CUSTOM_GAME: GameRule(scoring_mode=ScoringMode.HIGHER_SCORE, score_label="Points"),
}


def get_game_rule(game: str) -> GameRule:
    return GAME_RULES.get(game, GAME_RULES[CUSTOM_GAME])


# --- Resolvers: each returns 1, 2 or None (slot number of the winner) ---

def _resolve_higher_score(score1: int, score2: int, target_score: Optional[int]) -> Optional[int]:
    if score1 == score2:
        return None # Tie, match stays open
    return 1 if score1 > score2 else 2


def _resolve_lower_score(score1: int, score2: int, target_score: Optional[int]) -> Optional[int]:
    # Scores are finishing positions; 0 means the side has not finished yet
    if score1 == 0 and score2 == 0:
        return None
    if score1 == 0:
        return 2
    if score2 == 0:
        return 1
    if score1 == score2:
        return None
    return 1 if score1 < score2 else 2


def _resolve_best_of(score1: int, score2: int, target_score: Optional[int]) -> Optional[int]:
    if not target_score:
        return _resolve_higher_score(score1, score2, target_score)
    if score1 >= target_score:
        return 1
    if score2 >= target_score:
        return 2
    return None # Need more games


RESOLVERS: Dict[ScoringMode, Callable[[int, int, Optional[int]], Optional[int]]] = {
    ScoringMode.HIGHER_SCORE: _resolve_higher_score,
    ScoringMode.LOWER_SCORE: _resolve_lower_score,
    ScoringMode.BEST_OF: _resolve_best_of,
}


def determine_winner(
    tournament: TournamentModel,
    match: MatchModel,
    participant1_score: int,
    participant2_score: int,
) -> Optional[str]:
    """
    Decide the winner of `match` for the given scores under the tournament's scoring mode.

    Returns the winning participant id, or None when the match is undecided or
    does not have two occupants. Has no side effects.
    """
    if not match.is_full:
        return None

    resolver = RESOLVERS[ScoringMode(tournament.scoring_mode)]
    winning_slot = resolver(participant1_score, participant2_score, tournament.target_score)
    if winning_slot == 1:
        return match.participant1_id
    if winning_slot == 2:
        return match.participant2_id
    return None


def get_best_of_description(target_score: int) -> str:
    max_games = (target_score * 2) - 1
    return f"Best of {max_games} (First to {target_score})"


def get_match_status_text(tournament: TournamentModel, match: MatchModel) -> str:
    if not match.occupant_ids:
        return "Waiting for participants"
    if not match.is_full:
        return "Awaiting opponent"
    if match.winner_id:
        return f"{tournament.participant_name(match.winner_id)} advances"

    score1 = match.participant1_score
    score2 = match.participant2_score
    if score1 == 0 and score2 == 0:
        return "Not started"

    mode = ScoringMode(tournament.scoring_mode)
    if mode == ScoringMode.BEST_OF:
        needed = tournament.target_score or 2
        return f"Best of {needed * 2 - 1} (First to {needed} {tournament.score_label})"
    if mode == ScoringMode.LOWER_SCORE:
        return "Lower position wins"
    if score1 == score2:
        return f"Tied {score1}-{score2}"
    return f"{tournament.score_label}: {score1} - {score2}"
