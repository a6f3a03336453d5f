"""
Tests for the two LLM-calling stages with a mocked completion client.

Tests:
- Analysis runs in structured mode and parses the blueprint
- Malformed analysis output raises ParseError without retrying
- Card rendering runs in free-text mode, flags the cover and strips fences
"""

import json
import unittest
from unittest.mock import Mock, patch

from card_designer.analyzer import analyze_document
from card_designer.errors import ConfigurationError, ParseError
from card_designer.prompt_manager import DEFAULT_ATTRIBUTION, PromptManager
from card_designer.renderer import generate_card_html
from card_designer.schema import DesignBlueprint

BLUEPRINT_DATA = {
    "style": "Modern",
    "themeColor": "#111827",
    "secondaryColor": "#F97316",
    "fontPairing": {"heading": "Montserrat", "body": "Lato"},
    "cardOutlines": [
        {"title": "Photosynthesis Basics", "points": ["Light to chemical energy"]},
        {"title": "Chlorophyll", "points": ["Absorbs red and blue light"]},
    ],
    "description": "Bold modern cards",
}


def mock_client(content):
    client = Mock()
    client.complete.return_value = content
    client.analysis_model = "test-analysis"
    client.layout_model = "test-layout"
    return client


class TestAnalyzeDocument(unittest.TestCase):
    """Test analyze_document with mocked client"""

    def test_returns_blueprint(self):
        client = mock_client(json.dumps(BLUEPRINT_DATA))

        blueprint = analyze_document("Photosynthesis basics", "Auto", client=client)

        self.assertIsInstance(blueprint, DesignBlueprint)
        self.assertEqual(blueprint.card_count, 2)
        self.assertEqual(blueprint.card_outlines[0].title, "Photosynthesis Basics")

    def test_uses_structured_mode(self):
        client = mock_client(json.dumps(BLUEPRINT_DATA))

        analyze_document("Some text", "Business", client=client)

        client.complete.assert_called_once()
        messages = client.complete.call_args.args[0]
        self.assertTrue(client.complete.call_args.kwargs["structured"])
        self.assertIn("Some text", messages[1].content)
        self.assertIn("Business", messages[1].content)

    def test_malformed_json_raises_parse_error(self):
        client = mock_client("Sure! Here is your blueprint: {oops")

        with self.assertRaises(ParseError):
            analyze_document("Some text", client=client)

        client.complete.assert_called_once()

    def test_wrong_outline_shape_raises_parse_error(self):
        client = mock_client(json.dumps({"cardOutlines": [{"title": "a", "points": 5}]}))

        with self.assertRaises(ParseError):
            analyze_document("Some text", client=client)

    def test_client_errors_propagate(self):
        client = Mock()
        client.complete.side_effect = ConfigurationError("No API_KEY detected.")

        with self.assertRaises(ConfigurationError):
            analyze_document("Some text", client=client)

    @patch("card_designer.analyzer.get_client")
    def test_builds_client_from_environment_when_not_given(self, mock_get_client):
        mock_get_client.return_value = mock_client(json.dumps(BLUEPRINT_DATA))

        analyze_document("Some text")

        mock_get_client.assert_called_once_with()


class TestGenerateCardHtml(unittest.TestCase):
    """Test generate_card_html with mocked client"""

    def setUp(self):
        self.blueprint = DesignBlueprint.from_dict(BLUEPRINT_DATA)
        self.pm = PromptManager(attribution=DEFAULT_ATTRIBUTION)

    def test_uses_free_text_mode(self):
        client = mock_client("<div>card</div>")

        html = generate_card_html(self.blueprint, 1, client=client, prompt_manager=self.pm)

        self.assertEqual(html, "<div>card</div>")
        self.assertFalse(client.complete.call_args.kwargs["structured"])

    def test_index_zero_is_cover(self):
        client = mock_client("<div>cover</div>")

        generate_card_html(self.blueprint, 0, client=client, prompt_manager=self.pm)

        user = client.complete.call_args.args[0][1].content
        self.assertIn("Card type: cover", user)
        self.assertIn("Photosynthesis Basics", user)

    def test_other_indices_are_not_cover(self):
        client = mock_client("<div>content</div>")

        generate_card_html(self.blueprint, 1, client=client, prompt_manager=self.pm)

        user = client.complete.call_args.args[0][1].content
        self.assertIn("Card type: content", user)
        self.assertNotIn("Card type: cover", user)
        self.assertIn("Chlorophyll", user)

    def test_strips_html_fence(self):
        client = mock_client(
            f"```html\n<div>Photosynthesis<footer>{DEFAULT_ATTRIBUTION}</footer></div>\n```"
        )

        html = generate_card_html(self.blueprint, 0, client=client, prompt_manager=self.pm)

        self.assertNotIn("```", html)
        self.assertIn(DEFAULT_ATTRIBUTION, html)
        self.assertTrue(html.startswith("<div>"))

    def test_attribution_required_in_system_prompt(self):
        client = mock_client("<div></div>")

        generate_card_html(self.blueprint, 1, client=client, prompt_manager=self.pm)

        system = client.complete.call_args.args[0][0].content
        self.assertIn(DEFAULT_ATTRIBUTION, system)
        self.assertIn("700px * 1160px", system)


if __name__ == "__main__":
    unittest.main()
