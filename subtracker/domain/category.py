"""
Category reference data.

Categories are read-only: seeded once at initialization, never removed.
"""
from dataclasses import dataclass

DEFAULT_CATEGORY_ID = "other"


@dataclass(frozen=True)
class CategorySeed:
    id: str
    name: str
    icon: str
    color: str


DEFAULT_CATEGORIES = (
    CategorySeed("streaming", "Streaming", "play-circle", "#E50914"),
    CategorySeed("software", "Software", "laptop", "#0078D4"),
    CategorySeed("fitness", "Fitness", "dumbbell", "#4CAF50"),
    CategorySeed("gaming", "Gaming", "gamepad-variant", "#9C27B0"),
    CategorySeed("music", "Music", "music", "#1DB954"),
    CategorySeed("news", "News & Media", "newspaper", "#FF9800"),
    CategorySeed("storage", "Cloud Storage", "cloud", "#2196F3"),
    CategorySeed("utilities", "Utilities", "flash", "#FFC107"),
    CategorySeed(DEFAULT_CATEGORY_ID, "Other", "dots-horizontal", "#607D8B"),
)
