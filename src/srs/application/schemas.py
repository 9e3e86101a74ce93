"""Response models for the outward-facing operations.

Shared by the HTTP daemon (as response models) and the MCP server (as JSON
text), so both transports return exactly the same shapes.
"""

from datetime import datetime

from pydantic import BaseModel, Field, StrictInt, StrictStr

from srs.domain.models import Card, DeckStats


class DueCard(BaseModel):
    file_path: str
    question: str
    answer: str
    due: datetime
    state: str
    reps: int
    difficulty: float
    stability: float

    @classmethod
    def from_card(cls, card: Card) -> "DueCard":
        return cls(
            file_path=str(card.path),
            question=card.question,
            answer=card.answer,
            due=card.state.due,
            state=card.state.state.name,
            reps=card.state.reps,
            difficulty=card.state.difficulty,
            stability=card.state.stability,
        )


class DueCardsResponse(BaseModel):
    deck_path: str
    total_cards: int
    due_count: int
    due_cards: list[DueCard]
    warnings: list[str] = Field(default_factory=list)


class RateCardRequest(BaseModel):
    file_path: str | None = None
    rating: StrictInt | StrictStr | None = None


class RateCardResponse(BaseModel):
    success: bool
    card_path: str
    rating: str
    new_due_date: datetime
    new_state: str
    reps: int
    difficulty: float
    stability: float


class DeckStatsModel(BaseModel):
    total: int
    due: int
    new: int
    learning: int
    review: int
    relearning: int

    @classmethod
    def from_stats(cls, stats: DeckStats) -> "DeckStatsModel":
        return cls(**stats.to_dict())


class DeckStatsResponse(DeckStatsModel):
    deck_path: str
    warnings: list[str] = Field(default_factory=list)


class ListDecksResponse(BaseModel):
    base_path: str
    decks: dict[str, DeckStatsModel]
    warnings: list[str] = Field(default_factory=list)
