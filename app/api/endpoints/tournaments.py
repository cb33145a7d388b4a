import logging
from typing import Callable, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Path, Request, Response, status

from app.api.dependencies import get_tournament_store
from app.core.exceptions import NotFoundError, TournamentValidationError
from app.models.tournament_model import GameRule, ScoringMode, TournamentModel
from app.schemas import match_schemas, participant_schemas, tournament_schemas
from app.services import bracket_service, scoring_service, tournament_service
from app.services.participant_service import get_participant_status
from app.services.tournament_store import TournamentStore

logger = logging.getLogger(__name__)

router = APIRouter()


def get_tournament_or_404(
    tournament_id: str = Path(..., description="The ID of the tournament"),
    store: TournamentStore = Depends(get_tournament_store),
) -> TournamentModel:
    tournament = store.get(tournament_id)
    if not tournament:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tournament not found")
    return tournament


def _apply(store: TournamentStore, operation: Callable[..., TournamentModel], *args) -> TournamentModel:
    """Runs one aggregate operation and persists the result (read, mutate, persist as one unit)."""
    try:
        updated = operation(*args)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except TournamentValidationError as e:
        logger.warning("Rejected %s: %s", operation.__name__, e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return store.put(updated)


# --- Tournament collection ---

@router.get("", response_model=List[TournamentModel], summary="List Tournaments")
async def list_tournaments(store: TournamentStore = Depends(get_tournament_store)):
    return store.list()


@router.post("", response_model=TournamentModel, status_code=status.HTTP_201_CREATED, summary="Create Tournament")
async def create_tournament(
    tournament_in: tournament_schemas.TournamentCreate,
    store: TournamentStore = Depends(get_tournament_store),
):
    """
    Creates an empty, unstarted tournament.

    - **name**: 2-100 characters.
    - **game**: game title. When **scoring_mode** is omitted the game's preset is used.
    - **seeding_mode** (optional): `random` (default) or `seeded`.
    """
    try:
        if tournament_in.scoring_mode is None:
            tournament = tournament_service.create_tournament_from_game(
                tournament_in.name, tournament_in.game, seeding_mode=tournament_in.seeding_mode
            )
        else:
            tournament = tournament_service.create_tournament(
                name=tournament_in.name,
                game=tournament_in.game,
                scoring_mode=tournament_in.scoring_mode,
                score_label=tournament_in.score_label or "Points",
                target_score=tournament_in.target_score,
                seeding_mode=tournament_in.seeding_mode,
            )
    except TournamentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return store.put(tournament)


@router.get("/game-rules", response_model=Dict[str, GameRule], summary="Scoring Presets per Game")
async def list_game_rules():
    return scoring_service.GAME_RULES


@router.get("/export", summary="Export All Tournaments")
async def export_tournaments(store: TournamentStore = Depends(get_tournament_store)):
    """Returns every tournament record as a JSON array."""
    return Response(
        content=tournament_service.export_tournaments(store.list()),
        media_type="application/json",
    )


@router.post("/import", response_model=tournament_schemas.ImportResult, summary="Import Tournaments")
async def import_tournaments(request: Request, store: TournamentStore = Depends(get_tournament_store)):
    """
    Merges a JSON array of tournament records into the store.
    Each record needs an id, name and game; records replace existing ones with the same id.
    """
    body = await request.body()
    try:
        imported = tournament_service.import_tournaments(body.decode("utf-8"))
    except (TournamentValidationError, UnicodeDecodeError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    replaced = store.merge(imported)
    return tournament_schemas.ImportResult(imported=len(imported), replaced=replaced, tournaments=imported)


# --- Single tournament ---

@router.get("/{tournament_id}", response_model=TournamentModel, summary="Get Tournament")
async def get_tournament(tournament: TournamentModel = Depends(get_tournament_or_404)):
    return tournament


@router.get("/{tournament_id}/bracket", response_model=tournament_schemas.BracketOverview,
            summary="Bracket Overview")
async def get_bracket_overview(tournament: TournamentModel = Depends(get_tournament_or_404)):
    """Round labels, per-match status lines and the champion once the final is decided."""
    rounds = []
    for round_number in range(1, tournament.total_rounds + 1):
        matches = [
            tournament_schemas.MatchOverview(
                match_id=match.id,
                position=match.position,
                participant1_name=tournament.participant_name(match.participant1_id),
                participant2_name=tournament.participant_name(match.participant2_id),
                status_text=scoring_service.get_match_status_text(tournament, match),
            )
            for match in bracket_service.get_round_matches(tournament, round_number)
        ]
        rounds.append(tournament_schemas.RoundOverview(
            round_number=round_number,
            label=bracket_service.get_round_label(round_number, tournament.total_rounds),
            is_finalized=round_number in tournament.finalized_rounds,
            matches=matches,
        ))

    scoring_description = None
    if tournament.scoring_mode == ScoringMode.BEST_OF and tournament.target_score:
        scoring_description = scoring_service.get_best_of_description(tournament.target_score)

    return tournament_schemas.BracketOverview(
        tournament_id=tournament.id,
        current_round=tournament.current_round,
        total_rounds=tournament.total_rounds,
        scoring_description=scoring_description,
        champion=tournament_service.get_champion(tournament),
        rounds=rounds,
    )


@router.delete("/{tournament_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Tournament")
async def delete_tournament(
    tournament_id: str = Path(..., description="The ID of the tournament to delete"),
    store: TournamentStore = Depends(get_tournament_store),
):
    if not store.delete(tournament_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tournament not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{tournament_id}/settings", response_model=TournamentModel, summary="Update Scoring Settings")
async def update_settings(
    settings_in: tournament_schemas.TournamentSettingsUpdate,
    tournament: TournamentModel = Depends(get_tournament_or_404),
    store: TournamentStore = Depends(get_tournament_store),
):
    """Scoring and seeding settings are locked once the tournament has started."""
    return _apply(
        store,
        tournament_service.update_tournament_settings,
        tournament,
        settings_in.scoring_mode,
        settings_in.target_score,
        settings_in.seeding_mode,
    )


# --- Participants ---

@router.post("/{tournament_id}/participants", response_model=TournamentModel,
             status_code=status.HTTP_201_CREATED, summary="Add Participant")
async def add_participant(
    participant_in: participant_schemas.ParticipantCreate,
    tournament: TournamentModel = Depends(get_tournament_or_404),
    store: TournamentStore = Depends(get_tournament_store),
):
    return _apply(store, tournament_service.add_participant, tournament, participant_in.name)


@router.patch("/{tournament_id}/participants/{participant_id}", response_model=TournamentModel,
              summary="Rename Participant")
async def rename_participant(
    participant_in: participant_schemas.ParticipantUpdate,
    participant_id: str = Path(..., description="The ID of the participant"),
    tournament: TournamentModel = Depends(get_tournament_or_404),
    store: TournamentStore = Depends(get_tournament_store),
):
    return _apply(store, tournament_service.rename_participant, tournament, participant_id, participant_in.name)


@router.delete("/{tournament_id}/participants/{participant_id}", response_model=TournamentModel,
               summary="Remove Participant")
async def remove_participant(
    participant_id: str = Path(..., description="The ID of the participant"),
    tournament: TournamentModel = Depends(get_tournament_or_404),
    store: TournamentStore = Depends(get_tournament_store),
):
    return _apply(store, tournament_service.remove_participant, tournament, participant_id)


@router.get("/{tournament_id}/participants/{participant_id}/status",
            response_model=participant_schemas.ParticipantStatusRead, summary="Participant Status")
async def participant_status(
    participant_id: str = Path(..., description="The ID of the participant"),
    tournament: TournamentModel = Depends(get_tournament_or_404),
):
    participant = tournament.get_participant(participant_id)
    if not participant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Participant not found")
    return participant_schemas.ParticipantStatusRead(
        participant_id=participant.id,
        name=participant.name,
        status=get_participant_status(participant, tournament),
    )


# --- Bracket play ---

@router.post("/{tournament_id}/start", response_model=TournamentModel, summary="Start Tournament")
async def start_tournament(
    tournament: TournamentModel = Depends(get_tournament_or_404),
    store: TournamentStore = Depends(get_tournament_store),
):
    """Builds and seeds the bracket. Requires at least 2 participants; roster and scoring settings lock afterwards."""
    return _apply(store, tournament_service.start_tournament, tournament)


@router.put("/{tournament_id}/matches/{match_id}/score", response_model=TournamentModel, summary="Score Match")
async def score_match(
    payload: match_schemas.MatchScoreUpdate,
    match_id: str = Path(..., description="The ID of the match"),
    tournament: TournamentModel = Depends(get_tournament_or_404),
    store: TournamentStore = Depends(get_tournament_store),
):
    """
    Records both scores and the winner they imply under the tournament's scoring mode.
    A match that does not have two participants yet is left unchanged.
    """
    return _apply(
        store,
        tournament_service.score_match,
        tournament,
        match_id,
        payload.participant1_score,
        payload.participant2_score,
    )


@router.post("/{tournament_id}/rounds/{round_number}/finalize", response_model=TournamentModel,
             summary="Finalize Round")
async def finalize_round(
    round_number: int = Path(..., ge=1, description="The round to finalize"),
    tournament: TournamentModel = Depends(get_tournament_or_404),
    store: TournamentStore = Depends(get_tournament_store),
):
    """
    Locks in a round and moves winners, byes and wild cards into the next round.
    A round that is not ready yet is returned unchanged.
    """
    return _apply(store, tournament_service.finalize_tournament_round, tournament, round_number)


@router.post("/{tournament_id}/reset", response_model=TournamentModel, summary="Reset Tournament")
async def reset_tournament(
    tournament: TournamentModel = Depends(get_tournament_or_404),
    store: TournamentStore = Depends(get_tournament_store),
):
    """Clears the bracket and scores, keeping the participant roster."""
    return _apply(store, tournament_service.reset_tournament, tournament)
