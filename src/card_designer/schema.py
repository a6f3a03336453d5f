"""
Design Blueprint Schema

Data structures exchanged between the analysis stage, the card renderer
and the workflow controller.

Wire format (JSON from the analysis stage, camelCase keys):
  {
    "style": str,
    "themeColor": "#HEX",
    "secondaryColor": "#HEX",
    "fontPairing": {"heading": str, "body": str},
    "cardOutlines": [{"title": str, "points": [str, ...]}, ...],
    "description": str
  }

cardOutlines[0] is always the cover card.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .errors import ParseError

CARD_WIDTH = 700
CARD_HEIGHT = 1160


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class FontPairing:
    heading: str = ""
    body: str = ""


@dataclass(frozen=True)
class CardOutline:
    """
    One planned card prior to layout generation.

    Attributes:
        title: Card heading
        points: Ordered bullet points
    """
    title: str
    points: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CardOutline':
        if not isinstance(data, dict):
            raise ParseError(f"Card outline must be an object, got {type(data).__name__}")
        points = data.get('points')
        if points is None:
            points = []
        elif isinstance(points, str):
            points = [points]
        elif not isinstance(points, list):
            raise ParseError(f"Card outline points must be a list, got {type(points).__name__}")

        return cls(
            title=_text(data.get('title')).strip(),
            points=tuple(str(p).strip() for p in points if p is not None),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'title': self.title, 'points': list(self.points)}


@dataclass
class DesignBlueprint:
    """
    Structured design plan produced once per analysis call.

    Attributes:
        style: Chosen or forced visual style name
        theme_color: Primary colour token
        secondary_color: Accent colour token
        font_pairing: Heading/body font names
        card_outlines: Planned cards, index 0 is the cover
        description: Free-text design rationale

    Constraints:
        - card_outlines must not be empty
    """
    style: str
    theme_color: str
    secondary_color: str
    font_pairing: FontPairing
    card_outlines: List[CardOutline]
    description: str = ""

    def __post_init__(self):
        if not self.card_outlines:
            raise ParseError("Blueprint contains no card outlines")

    @property
    def card_count(self) -> int:
        return len(self.card_outlines)

    @property
    def last_index(self) -> int:
        return len(self.card_outlines) - 1

    @staticmethod
    def is_cover(index: int) -> bool:
        return index == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the camelCase wire format."""
        return {
            'style': self.style,
            'themeColor': self.theme_color,
            'secondaryColor': self.secondary_color,
            'fontPairing': {
                'heading': self.font_pairing.heading,
                'body': self.font_pairing.body,
            },
            'cardOutlines': [outline.to_dict() for outline in self.card_outlines],
            'description': self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DesignBlueprint':
        """
        Create a blueprint from the analysis stage's parsed JSON.

        Only the outline list is structurally required; scalar fields
        default to empty strings when the model leaves them out.

        Raises:
            ParseError: If data is not an object or has no card outlines
        """
        if not isinstance(data, dict):
            raise ParseError(f"Blueprint must be a JSON object, got {type(data).__name__}")

        outlines = data.get('cardOutlines')
        if not isinstance(outlines, list):
            raise ParseError(
                f"Blueprint is missing the cardOutlines list. Keys: {sorted(data.keys())}"
            )

        fonts = data.get('fontPairing') or {}
        if not isinstance(fonts, dict):
            fonts = {}

        return cls(
            style=_text(data.get('style')),
            theme_color=_text(data.get('themeColor')),
            secondary_color=_text(data.get('secondaryColor')),
            font_pairing=FontPairing(
                heading=_text(fonts.get('heading')),
                body=_text(fonts.get('body')),
            ),
            card_outlines=[CardOutline.from_dict(o) for o in outlines],
            description=_text(data.get('description')),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> 'DesignBlueprint':
        """
        Parse the raw analysis response.

        Raises:
            ParseError: If the string is not valid JSON or not a blueprint
        """
        try:
            data = json.loads(json_str)
        except (TypeError, ValueError) as e:
            raise ParseError(f"Blueprint response is not valid JSON: {e}") from e
        return cls.from_dict(data)


_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\s]+')


@dataclass
class GeneratedCard:
    """
    Markup produced for one outline. Replaced wholesale by the next render.
    """
    index: int
    html: str
    title: str = ""

    @property
    def download_name(self) -> str:
        """PNG file name: the card title, or the 1-based index without one."""
        label = _UNSAFE_FILENAME_CHARS.sub('-', self.title.strip()).strip('-')
        return f"knowledge-card-{label or self.index + 1}.png"

    def to_dict(self) -> Dict[str, Any]:
        return {'index': self.index, 'title': self.title, 'html': self.html}
