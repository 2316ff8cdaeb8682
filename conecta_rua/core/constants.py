"""
Conecta Rua - Constants and Reference Data
Static values used throughout the application.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple

# =============================================================================
# CITY AND MAP TILES
# =============================================================================

CITY_NAME = "Ponta Grossa - PR"
APP_TITLE = "Conecta Rua"

OSM_TILES_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
OSM_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
)

# =============================================================================
# REPORT CATEGORIES
# =============================================================================


class Category(str, Enum):
    """Issue categories. Values are the ones stored in the reports table."""
    POTHOLE = "buraco"
    LIGHTING = "iluminacao"
    STORM_DRAIN = "bueiro"
    SIDEWALK = "calcada"
    SIGNAGE = "sinalizacao"
    OTHER = "outros"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Category"]:
        """Return the matching category, or None for unknown values."""
        try:
            return cls(value)
        except ValueError:
            return None


# Filter sentinel meaning "no category filter"
ALL_CATEGORIES = "all"
ALL_CATEGORIES_LABEL = "Todas as categorias"

CATEGORY_LABELS: Dict[Category, str] = {
    Category.POTHOLE: "Buraco",
    Category.LIGHTING: "Iluminação",
    Category.STORM_DRAIN: "Bueiro",
    Category.SIDEWALK: "Calçada",
    Category.SIGNAGE: "Sinalização",
    Category.OTHER: "Outros",
}

# Marker colors on the map
CATEGORY_COLORS: Dict[Category, str] = {
    Category.POTHOLE: "#ef4444",      # red
    Category.LIGHTING: "#f59e0b",     # amber
    Category.STORM_DRAIN: "#06b6d4",  # cyan
    Category.SIDEWALK: "#8b5cf6",     # violet
    Category.SIGNAGE: "#f97316",      # orange
    Category.OTHER: "#6b7280",        # gray
}

NEUTRAL_COLOR = CATEGORY_COLORS[Category.OTHER]

# Badge colors on the detail page (background, text)
CATEGORY_BADGE_COLORS: Dict[Category, Tuple[str, str]] = {
    Category.POTHOLE: ("#fee2e2", "#991b1b"),
    Category.LIGHTING: ("#fef3c7", "#92400e"),
    Category.STORM_DRAIN: ("#cffafe", "#155e75"),
    Category.SIDEWALK: ("#ede9fe", "#5b21b6"),
    Category.SIGNAGE: ("#ffedd5", "#9a3412"),
    Category.OTHER: ("#f3f4f6", "#1f2937"),
}


def get_category_label(category: Optional[str]) -> str:
    """Portuguese label for a category value, 'Outros' when unknown."""
    parsed = Category.parse(category)
    return CATEGORY_LABELS[parsed or Category.OTHER]


def get_category_color(category: Optional[str]) -> str:
    """Marker color for a category value, neutral gray when unknown."""
    parsed = Category.parse(category)
    return CATEGORY_COLORS[parsed] if parsed else NEUTRAL_COLOR


def get_category_badge(category: Optional[str]) -> Tuple[str, str]:
    """Badge (background, text) colors for a category value."""
    parsed = Category.parse(category)
    return CATEGORY_BADGE_COLORS[parsed or Category.OTHER]


def category_options(include_all: bool = False) -> List[Dict[str, str]]:
    """Options for category selects, in display order."""
    options = []
    if include_all:
        options.append({"value": ALL_CATEGORIES, "label": ALL_CATEGORIES_LABEL})
    for category in Category:
        options.append({
            "value": category.value,
            "label": CATEGORY_LABELS[category],
            "color": CATEGORY_COLORS[category],
        })
    return options


# =============================================================================
# DISPLAY FALLBACKS
# =============================================================================

ANONYMOUS_USER = "Usuário anônimo"
DEFAULT_USER_NAME = "Usuário"
DEFAULT_AVATAR_INITIAL = "U"

# =============================================================================
# BACKEND TABLES
# =============================================================================

REPORTS_TABLE = "reports"
COMMENTS_TABLE = "comments"

# Embedded joins used to denormalize the author's display name
REPORTS_SELECT = "*,profiles!reports_user_id_fkey(full_name)"
COMMENTS_SELECT = "*,profiles!comments_user_id_fkey(full_name)"
