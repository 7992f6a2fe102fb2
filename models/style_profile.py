"""Per-user style profile summarising wardrobe contents and feedback."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from models.wardrobe_item import ensure_utc, utc_now

DEFAULT_BODY_TYPE_PREFERENCES = ["regular-fit", "versatile"]


@dataclass
class ConfidencePattern:
    """Remembered rating for a specific item combination."""

    item_combination: List[str]
    average_rating: float
    context_factors: List[str] = field(default_factory=list)
    emotional_responses: List[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return ",".join(sorted(self.item_combination))


@dataclass
class StyleProfile:
    user_id: str
    preferred_colors: List[str] = field(default_factory=list)
    preferred_styles: List[str] = field(default_factory=list)
    body_type_preferences: List[str] = field(default_factory=lambda: list(DEFAULT_BODY_TYPE_PREFERENCES))
    occasion_preferences: Dict[str, float] = field(default_factory=dict)
    confidence_patterns: List[ConfidencePattern] = field(default_factory=list)
    last_updated: datetime = field(default_factory=utc_now)

    def find_pattern(self, item_ids: List[str]) -> Optional[ConfidencePattern]:
        key = ",".join(sorted(item_ids))
        for pattern in self.confidence_patterns:
            if pattern.key == key:
                return pattern
        return None

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["last_updated"] = ensure_utc(self.last_updated).isoformat()
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "StyleProfile":
        last_updated = payload.get("last_updated")
        return cls(
            user_id=str(payload["user_id"]),
            preferred_colors=list(payload.get("preferred_colors") or []),
            preferred_styles=list(payload.get("preferred_styles") or []),
            body_type_preferences=list(payload.get("body_type_preferences") or DEFAULT_BODY_TYPE_PREFERENCES),
            occasion_preferences={str(k): float(v) for k, v in (payload.get("occasion_preferences") or {}).items()},
            confidence_patterns=[
                ConfidencePattern(
                    item_combination=list(raw.get("item_combination") or []),
                    average_rating=float(raw.get("average_rating", 0.0)),
                    context_factors=list(raw.get("context_factors") or []),
                    emotional_responses=list(raw.get("emotional_responses") or []),
                )
                for raw in payload.get("confidence_patterns") or []
            ],
            last_updated=ensure_utc(datetime.fromisoformat(last_updated)) if last_updated else utc_now(),
        )


def empty_profile(user_id: str) -> StyleProfile:
    return StyleProfile(user_id=user_id)


__all__ = ["ConfidencePattern", "DEFAULT_BODY_TYPE_PREFERENCES", "StyleProfile", "empty_profile"]
