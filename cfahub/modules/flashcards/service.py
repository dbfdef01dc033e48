from supabase import Client
from cfahub.core.errors import ContentValidationError, backend_failure, validation_failure
from cfahub.modules.content.service import ContentService
from cfahub.modules.flashcards.review import ReviewDeck
from cfahub.modules.flashcards.schemas import CardCreate, CardResponse, TsvExport, ReviewState
from typing import Dict, List, Tuple
from fastapi import HTTPException
import re
import logging

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r?\n")


def parse_tsv(text: str) -> List[Tuple[str, str]]:
    """
    One card per non-empty line: front, TAB, back. Tabs after the first stay
    in the back. Raises ContentValidationError naming the 1-based line among
    non-empty lines.
    """
    lines = [line.strip() for line in _LINE_BREAK.split(text or "")]
    lines = [line for line in lines if line]
    if not lines:
        raise ContentValidationError("tsv_empty")
    cards = []
    for number, line in enumerate(lines, start=1):
        parts = line.split("\t")
        if len(parts) < 2:
            raise ContentValidationError("tsv_missing_tab", line=number)
        cards.append((parts[0].strip(), "\t".join(parts[1:]).strip()))
    return cards


def format_tsv(cards: List[Dict]) -> str:
    return "\n".join(
        f"{(c.get('front') or '').replace(chr(9), ' ')}\t{(c.get('back') or '').replace(chr(9), ' ')}"
        for c in cards
    )


class FlashcardService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.sets = ContentService(supabase, "flashcards")

    def _fetch_cards(self, set_id: str) -> List[dict]:
        result = self.supabase.table("flashcards")\
            .select("id,set_id,front,back,position")\
            .eq("set_id", set_id)\
            .order("position", desc=False)\
            .execute()
        return result.data or []

    def list_cards(self, set_id: str, user_id: str, member_group_ids: List[str]) -> List[CardResponse]:
        self.sets.require_view(set_id, user_id, member_group_ids)
        try:
            return [CardResponse(**row) for row in self._fetch_cards(set_id)]
        except Exception as e:
            raise backend_failure(e, f"Listing cards of {set_id}")

    def add_card(self, set_id: str, card: CardCreate, user_id: str, member_group_ids: List[str], locale: str) -> CardResponse:
        """Quick add at position = count + 1"""
        front, back = card.front.strip(), card.back.strip()
        if not front or not back:
            raise validation_failure(ContentValidationError("card_required"), locale)
        self.sets.require_edit(set_id, user_id, member_group_ids)
        try:
            position = len(self._fetch_cards(set_id)) + 1
            result = self.supabase.table("flashcards").insert({
                "set_id": set_id,
                "front": front,
                "back": back,
                "position": position
            }).execute()
            if not result.data:
                raise HTTPException(status_code=502, detail="Failed to add card")
            return CardResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise backend_failure(e, f"Adding card to {set_id}")

    def import_tsv(self, set_id: str, text: str, user_id: str, member_group_ids: List[str], locale: str) -> List[CardResponse]:
        """Append the parsed cards after the existing ones, in one insert"""
        try:
            parsed = parse_tsv(text)
        except ContentValidationError as e:
            raise validation_failure(e, locale)
        self.sets.require_edit(set_id, user_id, member_group_ids)
        try:
            start = len(self._fetch_cards(set_id))
            rows = [
                {"set_id": set_id, "front": front, "back": back, "position": start + i}
                for i, (front, back) in enumerate(parsed, start=1)
            ]
            result = self.supabase.table("flashcards").insert(rows).execute()
            logger.info(f"Imported {len(rows)} cards into {set_id}")
            return [CardResponse(**row) for row in result.data or []]
        except Exception as e:
            raise backend_failure(e, f"Importing cards into {set_id}")

    def export_tsv(self, set_id: str, user_id: str, member_group_ids: List[str]) -> TsvExport:
        cards = self.list_cards(set_id, user_id, member_group_ids)
        return TsvExport(text=format_tsv([c.model_dump() for c in cards]), count=len(cards))

    def delete_card(self, set_id: str, card_id: str, user_id: str, member_group_ids: List[str]) -> bool:
        self.sets.require_edit(set_id, user_id, member_group_ids)
        try:
            result = self.supabase.table("flashcards")\
                .delete()\
                .eq("id", card_id)\
                .eq("set_id", set_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Card not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise backend_failure(e, f"Deleting card {card_id}")

    def review(self, set_id: str, user_id: str, member_group_ids: List[str], index: int = 0, flipped: bool = False) -> ReviewState:
        """Review position `index` of the set, front side unless `flipped`"""
        deck = ReviewDeck(self.list_cards(set_id, user_id, member_group_ids), index=index)
        if flipped:
            deck.flip()
        card = deck.current
        face = None
        if card is not None:
            face = card.back if deck.flipped else card.front
        return ReviewState(
            index=deck.index,
            flipped=deck.flipped,
            progress=deck.progress,
            has_prev=deck.has_prev,
            has_next=deck.has_next,
            card=card,
            face=face
        )
