from fastapi import APIRouter, Depends, Query
from cfahub.modules.flashcards.schemas import CardCreate, CardResponse, TsvImport, TsvExport, ReviewState
from cfahub.modules.flashcards.service import FlashcardService
from cfahub.core.dependencies import get_current_user, get_db, get_access_cache, get_locale, get_user_group_ids
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/flashcard-sets", tags=["flashcards"])


def get_flashcard_service(db: Client = Depends(get_db)) -> FlashcardService:
    return FlashcardService(db)


@router.get("/{set_id}/cards", response_model=List[CardResponse])
async def list_cards(
    set_id: str,
    user_data: Dict = Depends(get_current_user),
    service: FlashcardService = Depends(get_flashcard_service),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache)
):
    """Cards of a set in order"""
    return service.list_cards(set_id, user_data["id"], get_user_group_ids(user_data["id"], db, cache))


@router.post("/{set_id}/cards", response_model=CardResponse, status_code=201)
async def add_card(
    set_id: str,
    card: CardCreate,
    user_data: Dict = Depends(get_current_user),
    service: FlashcardService = Depends(get_flashcard_service),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache),
    locale: str = Depends(get_locale)
):
    """Add one card at the end of the set"""
    member_groups = get_user_group_ids(user_data["id"], db, cache)
    return service.add_card(set_id, card, user_data["id"], member_groups, locale)


@router.delete("/{set_id}/cards/{card_id}", status_code=204)
async def delete_card(
    set_id: str,
    card_id: str,
    user_data: Dict = Depends(get_current_user),
    service: FlashcardService = Depends(get_flashcard_service),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache)
):
    service.delete_card(set_id, card_id, user_data["id"], get_user_group_ids(user_data["id"], db, cache))
    return None


@router.post("/{set_id}/import", response_model=List[CardResponse], status_code=201)
async def import_cards(
    set_id: str,
    body: TsvImport,
    user_data: Dict = Depends(get_current_user),
    service: FlashcardService = Depends(get_flashcard_service),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache),
    locale: str = Depends(get_locale)
):
    """Append cards from tab-separated text (front TAB back per line)"""
    member_groups = get_user_group_ids(user_data["id"], db, cache)
    return service.import_tsv(set_id, body.text, user_data["id"], member_groups, locale)


@router.get("/{set_id}/export", response_model=TsvExport)
async def export_cards(
    set_id: str,
    user_data: Dict = Depends(get_current_user),
    service: FlashcardService = Depends(get_flashcard_service),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache)
):
    """Cards as tab-separated text"""
    return service.export_tsv(set_id, user_data["id"], get_user_group_ids(user_data["id"], db, cache))


@router.get("/{set_id}/review", response_model=ReviewState)
async def review_card(
    set_id: str,
    index: int = Query(0, ge=0),
    flipped: bool = False,
    user_data: Dict = Depends(get_current_user),
    service: FlashcardService = Depends(get_flashcard_service),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache)
):
    """One review step: the card at `index`, its visible face and the progress text"""
    member_groups = get_user_group_ids(user_data["id"], db, cache)
    return service.review(set_id, user_data["id"], member_groups, index=index, flipped=flipped)
