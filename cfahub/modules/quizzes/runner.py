"""
Quiz-taking state machine.

One question at a time: pick a choice, validate to reveal the correction
(the score moves here), then go to the next question. After the last one the
run is finished and keeps its score until restarted.
"""

import time
from typing import Callable, List, Optional, Sequence

from cfahub.core.errors import ContentValidationError


class QuizRun:
    def __init__(self, correct_indices: Sequence[int], clock: Callable[[], float] = time.monotonic):
        self.correct_indices: List[int] = list(correct_indices)
        self.clock = clock
        self.start()

    def start(self):
        self.index = 0
        self.selected: Optional[int] = None
        self.show_correction = False
        self.finished = not self.correct_indices
        self.score = 0
        self.answers: List[bool] = []
        self.started_at = self.clock()
        self.finished_at: Optional[float] = self.started_at if self.finished else None

    restart = start

    @property
    def total(self) -> int:
        return len(self.correct_indices)

    @property
    def duration_seconds(self) -> int:
        end = self.finished_at if self.finished_at is not None else self.clock()
        return int(round(end - self.started_at))

    def select(self, choice: int):
        # The answer is locked once the correction is shown
        if self.finished or self.show_correction:
            return
        self.selected = choice

    def validate(self) -> bool:
        """Reveal the correction; True when the selected choice is right"""
        if self.finished:
            return False
        if self.show_correction:
            return self.answers[-1]
        if self.selected is None:
            raise ContentValidationError("no_selection")
        correct = self.selected == self.correct_indices[self.index]
        if correct:
            self.score += 1
        self.answers.append(correct)
        self.show_correction = True
        return correct

    def next(self):
        if self.finished:
            return
        if not self.show_correction:
            # skipped question
            self.answers.append(False)
        if self.index + 1 >= self.total:
            self.finished = True
            self.finished_at = self.clock()
        else:
            self.index += 1
        self.selected = None
        self.show_correction = False
