"""
Tests for the command-line pipeline.
"""

import asyncio
import io
import json
from unittest.mock import AsyncMock, Mock, patch

import pytest

from card_designer.errors import ExportError
from card_designer.main import main, run_pipeline
from card_designer.prompt_manager import PromptManager
from card_designer.workflow import WorkflowController

BLUEPRINT = {
    "style": "Modern",
    "themeColor": "#222222",
    "secondaryColor": "#FF6B35",
    "fontPairing": {"heading": "Inter", "body": "Inter"},
    "cardOutlines": [
        {"title": "Cover", "points": ["Intro"]},
        {"title": "Second", "points": ["a", "b"]},
        {"title": "Third", "points": ["c"]},
    ],
}


def make_controller(*responses, exporter=None):
    client = Mock()
    client.analysis_model = "test-analysis"
    client.layout_model = "test-layout"
    client.complete.side_effect = list(responses)
    return WorkflowController(client=client, prompt_manager=PromptManager(), exporter=exporter), client


class TestRunPipeline:

    def test_writes_blueprint_and_cards(self, tmp_path):
        controller, client = make_controller(
            json.dumps(BLUEPRINT), "<div>1</div>", "<div>2</div>", "<div>3</div>"
        )

        results = asyncio.run(run_pipeline("Some text", output_dir=tmp_path, controller=controller))

        assert results['total_cards'] == 3
        assert results['generated'] == 3
        assert results['failed'] == 0
        assert json.loads((tmp_path / 'blueprint.json').read_text(encoding='utf-8'))['style'] == "Modern"
        assert (tmp_path / 'card-01.html').read_text(encoding='utf-8') == "<div>1</div>"
        assert (tmp_path / 'card-03.html').exists()
        assert client.complete.call_count == 4

    def test_max_cards(self, tmp_path):
        controller, client = make_controller(json.dumps(BLUEPRINT), "<div>1</div>")

        results = asyncio.run(run_pipeline("Text", output_dir=tmp_path, max_cards=1, controller=controller))

        assert results['generated'] == 1
        assert not (tmp_path / 'card-02.html').exists()
        assert client.complete.call_count == 2

    def test_analysis_failure(self, tmp_path):
        controller, _ = make_controller("garbage")

        results = asyncio.run(run_pipeline("Text", output_dir=tmp_path, controller=controller))

        assert results['failed'] == 1
        assert results['errors'][0][0] == 'analyze'
        assert not (tmp_path / 'blueprint.json').exists()

    def test_card_failure_continues(self, tmp_path):
        controller, _ = make_controller(
            json.dumps(BLUEPRINT), "<div>1</div>", RuntimeError("layout down"), "<div>3</div>"
        )

        results = asyncio.run(run_pipeline("Text", output_dir=tmp_path, controller=controller))

        assert results['generated'] == 2
        assert results['failed'] == 1
        assert results['errors'] == [('card-2', "layout down")]
        assert not (tmp_path / 'card-02.html').exists()
        assert (tmp_path / 'card-03.html').exists()

    def test_png_export(self, tmp_path):
        exported = []

        async def fake_exporter(html, output_path):
            exported.append(output_path)
            return output_path

        controller, _ = make_controller(json.dumps(BLUEPRINT), "<div>1</div>", exporter=fake_exporter)

        results = asyncio.run(run_pipeline(
            "Text", output_dir=tmp_path, max_cards=1, export_png=True, controller=controller
        ))

        assert results['exported'] == 1
        assert exported == [tmp_path / 'knowledge-card-Cover.png']

    def test_png_export_failure_is_recorded(self, tmp_path):
        async def broken_exporter(html, output_path):
            raise ExportError("Image export failed.")

        controller, _ = make_controller(json.dumps(BLUEPRINT), "<div>1</div>", exporter=broken_exporter)

        results = asyncio.run(run_pipeline(
            "Text", output_dir=tmp_path, max_cards=1, export_png=True, controller=controller
        ))

        assert results['generated'] == 1
        assert results['exported'] == 0
        assert results['errors'] == [('export-1', "Image export failed.")]


class TestMain:

    def test_empty_stdin_exits_with_error(self):
        with patch('sys.stdin', io.StringIO("   \n")), pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1

    @patch('card_designer.main.run_pipeline', new_callable=AsyncMock)
    def test_success_exit_code(self, mock_pipeline, tmp_path):
        text_file = tmp_path / 'notes.txt'
        text_file.write_text("Photosynthesis basics", encoding='utf-8')
        mock_pipeline.return_value = {'failed': 0}

        with pytest.raises(SystemExit) as exc:
            main(['--text-file', str(text_file), '--style', 'Academic', '--cards', '2'])

        assert exc.value.code == 0
        kwargs = mock_pipeline.call_args.kwargs
        assert kwargs['text'] == "Photosynthesis basics"
        assert kwargs['style'] == 'Academic'
        assert kwargs['max_cards'] == 2
        assert kwargs['export_png'] is False

    @patch('card_designer.main.run_pipeline', new_callable=AsyncMock)
    def test_failures_exit_code(self, mock_pipeline):
        mock_pipeline.return_value = {'failed': 2}

        with patch('sys.stdin', io.StringIO("text")), pytest.raises(SystemExit) as exc:
            main(['--png'])

        assert exc.value.code == 1
        assert mock_pipeline.call_args.kwargs['export_png'] is True

    @pytest.mark.parametrize("value", ["0", "-1", "two"])
    @patch('card_designer.main.run_pipeline', new_callable=AsyncMock)
    def test_card_count_must_be_positive(self, mock_pipeline, value):
        with patch('sys.stdin', io.StringIO("text")), pytest.raises(SystemExit) as exc:
            main(['--cards', value])

        assert exc.value.code == 2
        mock_pipeline.assert_not_called()
