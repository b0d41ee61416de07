"""CEFR level ordering and display info."""

# Full scale used for content metadata; the placement test only moves inside PLACEMENT_LEVELS.
CEFR_ORDER = ("A1", "A2", "B1", "B2", "C1", "C2")
PLACEMENT_LEVELS = ("A1", "A2", "B1", "B2")

SKILLS = ("vocabulary", "grammar", "listening", "reading")

LEVEL_INFO = {
    "A1": {"name": "Beginner", "korean_name": "초급", "color": "#10b981",
           "description": "기초 표현과 간단한 문장"},
    "A2": {"name": "Elementary", "korean_name": "기초", "color": "#3b82f6",
           "description": "일상적인 상황 대처 가능"},
    "B1": {"name": "Intermediate", "korean_name": "중급", "color": "#f59e0b",
           "description": "주요 상황에서 자연스러운 대화"},
    "B2": {"name": "Upper Intermediate", "korean_name": "중상급", "color": "#ef4444",
           "description": "복잡한 주제 이해 및 토론 가능"},
    "C1": {"name": "Advanced", "korean_name": "고급", "color": "#8b5cf6",
           "description": "복잡한 텍스트 이해 및 자연스러운 표현"},
    "C2": {"name": "Proficient", "korean_name": "최상급", "color": "#ec4899",
           "description": "원어민 수준의 유창함"},
}


def is_level(level: str) -> bool:
    return level in CEFR_ORDER


def level_index(level: str) -> int:
    """Position of a level on the placement scale (A1=0 ... B2=3)."""
    if level not in PLACEMENT_LEVELS:
        raise ValueError(f"Not a placement level: {level!r}")
    return PLACEMENT_LEVELS.index(level)


def promote(level: str) -> str:
    """One step up, capped at B2."""
    idx = level_index(level)
    return PLACEMENT_LEVELS[min(idx + 1, len(PLACEMENT_LEVELS) - 1)]


def demote(level: str) -> str:
    """One step down, floored at A1."""
    idx = level_index(level)
    return PLACEMENT_LEVELS[max(idx - 1, 0)]


def shift(level: str, steps: int) -> str:
    idx = level_index(level) + steps
    idx = max(0, min(idx, len(PLACEMENT_LEVELS) - 1))
    return PLACEMENT_LEVELS[idx]


def level_distance(a: str, b: str) -> int:
    return abs(level_index(a) - level_index(b))


def get_level_info(level: str) -> dict:
    if level not in LEVEL_INFO:
        raise ValueError(f"Unknown CEFR level: {level!r}")
    return dict(LEVEL_INFO[level], code=level)
