"""Flashcard review: one card at a time, front first."""

from typing import Generic, List, Optional, Sequence, TypeVar

Card = TypeVar("Card")


class ReviewDeck(Generic[Card]):
    def __init__(self, cards: Sequence[Card], index: int = 0):
        self.cards: List[Card] = list(cards)
        self.index = max(0, min(index, len(self.cards) - 1)) if self.cards else 0
        self.flipped = False

    @property
    def total(self) -> int:
        return len(self.cards)

    @property
    def current(self) -> Optional[Card]:
        return self.cards[self.index] if self.cards else None

    @property
    def progress(self) -> str:
        if not self.cards:
            return "0/0"
        return f"{self.index + 1}/{self.total}"

    @property
    def has_prev(self) -> bool:
        return self.index > 0

    @property
    def has_next(self) -> bool:
        return self.index < self.total - 1

    def flip(self):
        if self.cards:
            self.flipped = not self.flipped

    def next(self):
        self.index = min(max(self.total - 1, 0), self.index + 1)
        self.flipped = False

    def prev(self):
        self.index = max(0, self.index - 1)
        self.flipped = False
