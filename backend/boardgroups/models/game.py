"""
models/game.py — Game catalog snapshot.

A GameRecord is whatever the catalog client returned for one game. It is
stored once per id in the global game table and never mutated in place:
adding the same game again replaces the whole record (last write wins).
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GameRecord:
    id: str
    name: str
    description: str | None = None
    url: str | None = None
    image_url: str | None = None
    publisher: str | None = None
    amazon_rank: int | None = None
    price: str | None = None
    mechanics: tuple[str, ...] = field(default_factory=tuple)
    categories: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        """Wire/document shape. Lists, not tuples, so it JSON-encodes cleanly."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "url": self.url,
            "imageUrl": self.image_url,
            "publisher": self.publisher,
            "amazonRank": self.amazon_rank,
            "price": self.price,
            "mechanics": list(self.mechanics),
            "categories": list(self.categories),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GameRecord":
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description"),
            url=data.get("url"),
            image_url=data.get("imageUrl"),
            publisher=data.get("publisher"),
            amazon_rank=data.get("amazonRank"),
            price=data.get("price"),
            mechanics=tuple(data.get("mechanics") or ()),
            categories=tuple(data.get("categories") or ()),
        )


@dataclass(frozen=True)
class PopularGame:
    """One row of the popularity ranking: a cached game and its user count."""

    id: str
    name: str
    count: int

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "count": self.count}
