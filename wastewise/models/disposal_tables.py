"""
Static disposal tables
- Keyword lists that map raw model labels to waste categories
- Disposal profiles describing how each outcome is handled

Changing disposal guidance means editing these tables, not the classifier.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple


class WasteCategory(Enum):
    """Scoring axis used by the keyword vote (declaration order breaks ties)"""
    PLASTIC_FILM = "PlasticFilm"
    RIGID_PLASTIC = "RigidPlastic"
    METAL = "Metal"
    GLASS = "Glass"
    CARDBOARD = "Cardboard"
    PAPER = "Paper"
    FOOD_ORGANICS = "FoodOrganics"


@dataclass(frozen=True)
class DisposalProfile:
    """Disposal outcome with its guidance text"""
    type: str
    recyclable: bool
    note: str
    compostable: bool = False
    special: bool = False


# Keywords matched as substrings of the lowercased label
KEYWORD_SCORES: Mapping[WasteCategory, Tuple[str, ...]] = MappingProxyType({
    WasteCategory.PLASTIC_FILM: (
        'plastic bag', 'film', 'wrapping', 'wrap', 'grocery bag', 'carrier bag',
        'plastic sheet', 'polyethylene', 'shopping bag', 'clear plastic',
    ),
    WasteCategory.METAL: (
        'metal', 'steel', 'aluminum', 'aluminium', 'tin', 'can', 'foil',
        'beverage can', 'utensil', 'cutlery', 'silverware', 'cookware',
    ),
    WasteCategory.RIGID_PLASTIC: (
        'bottle', 'container', 'jug', 'rigid plastic', 'tub', 'pet bottle',
        'plastic bottle',
    ),
    WasteCategory.PAPER: (
        'paper', 'book', 'magazine', 'newspaper', 'flyer', 'printed paper',
        'notebook',
    ),
    # 'bottle' overlaps with RIGID_PLASTIC on purpose
    WasteCategory.GLASS: (
        'glass', 'jar', 'shattered', 'cup', 'tumbler', 'cut glass', 'bottle',
        'window',
    ),
    WasteCategory.CARDBOARD: (
        'box', 'cardboard', 'carton', 'packaging', 'paperboard', 'corrugated',
    ),
    WasteCategory.FOOD_ORGANICS: (
        'banana', 'apple', 'orange', 'pizza slice', 'leaf', 'log', 'food',
        'fruit', 'vegetable', 'compost', 'peel',
    ),
})

# Top labels that always mean hazardous glass
SAFETY_KEYWORDS: Tuple[str, ...] = ('broken glass', 'shattered', 'broken cup', 'cut glass')

# Fallback heuristics applied to the top label when the vote has no winner
PAPER_FALLBACK_KEYWORDS: Tuple[str, ...] = ('book', 'newspaper')
CONTAINER_FALLBACK_KEYWORDS: Tuple[str, ...] = ('bottle', 'can', 'book')

PAPER_FALLBACK_NOTE = "Model was vague but identified a paper product. Assuming clean and dry paper."
CONTAINER_FALLBACK_NOTE = "Model was vague but identified a container type. Assuming standard rigid plastic."

MIN_WINNING_SCORE = 0.3
LABEL_BONUS = 0.1
MAX_CONSIDERED_PREDICTIONS = 5
SCORE_PRECISION = 6

UNKNOWN_FALLBACK = 'UNKNOWN_FALLBACK'
BROKEN_GLASS_SPECIAL = 'broken_glass_special'

WASTE_MAP: Mapping[str, DisposalProfile] = MappingProxyType({
    'rigid_plastic_default': DisposalProfile(
        type='Plastic (Rigid)', recyclable=True,
        note='Empty, rinse, and replace the cap. This is rigid plastic.',
    ),
    'metal_default': DisposalProfile(
        type='Metal', recyclable=True,
        note='Rinse well and flatten if possible.',
    ),
    'glass_default': DisposalProfile(
        type='Glass', recyclable=True,
        note='Empty and rinse well. **Intact** glass containers are recyclable.',
    ),
    'cardboard_default': DisposalProfile(
        type='Cardboard', recyclable=True,
        note='Must be flattened and dry. Remove all tape.',
    ),
    'paper_default': DisposalProfile(
        type='Paper', recyclable=True,
        note='Recyclable. Books, newspapers, and office paper should be clean and dry.',
    ),
    'plastic_film_trash': DisposalProfile(
        type='Miscellaneous Trash', recyclable=False,
        note='Plastic film/bags are NOT curbside recyclable. Use store drop-off or trash.',
    ),
    BROKEN_GLASS_SPECIAL: DisposalProfile(
        type='Miscellaneous Trash', recyclable=False, special=True,
        note=('DANGER: Broken or shattered glass is NOT recyclable curbside due to safety. '
              '**Throw it in the trash** only after safely wrapping the pieces in thick '
              'newspaper or a small box.'),
    ),
    'organic_compost': DisposalProfile(
        type='Food Organics', recyclable=False, compostable=True,
        note='Compostable/Green Bin waste.',
    ),
    UNKNOWN_FALLBACK: DisposalProfile(
        type='Miscellaneous Trash', recyclable=False,
        note='Item not in the specific waste map. Defaulting to Miscellaneous Trash.',
    ),
})

CATEGORY_PROFILES: Mapping[WasteCategory, str] = MappingProxyType({
    WasteCategory.RIGID_PLASTIC: 'rigid_plastic_default',
    WasteCategory.PLASTIC_FILM: 'plastic_film_trash',
    WasteCategory.METAL: 'metal_default',
    WasteCategory.CARDBOARD: 'cardboard_default',
    WasteCategory.PAPER: 'paper_default',
    WasteCategory.GLASS: 'glass_default',
    WasteCategory.FOOD_ORGANICS: 'organic_compost',
})
