"""
Knowledge Card Designer Pipeline

Command-line entry point: analyzes a text into a blueprint, then renders
every card (or the first N) to HTML and optionally PNG.

Usage:
    card-designer --text-file notes.txt --style Auto --output-dir cards/
    cat notes.txt | python -m card_designer.main --png

Environment Variables:
    API_KEY: Completion endpoint credential (required)
    CARD_API_BASE_URL: Endpoint base URL (default: https://sg.uiuiapi.com)
    CARD_ATTRIBUTION: Caption placed on every card
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ExportError, describe_error
from .prompt_manager import AUTO_STYLE, STYLE_VOCABULARY, estimate_cost
from .workflow import WorkflowController

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def run_pipeline(
    text: str,
    style: str = AUTO_STYLE,
    output_dir: Path = Path('cards'),
    max_cards: Optional[int] = None,
    export_png: bool = False,
    controller: Optional[WorkflowController] = None,
) -> Dict[str, Any]:
    """
    Run the complete analysis + card generation pipeline.

    Steps:
    1. Analyze the text into a blueprint (written to blueprint.json)
    2. Render each card to card-NN.html
    3. Optionally export each card to PNG

    Args:
        text: Raw document text
        style: "Auto" or an exact style name
        output_dir: Directory for blueprint, HTML and PNG files
        max_cards: Render only the first N cards (all if None)
        export_png: Also export PNGs
        controller: Optional pre-configured WorkflowController

    Returns:
        Dictionary with pipeline results:
        - total_cards: Cards in the blueprint
        - generated: Cards rendered to HTML
        - exported: PNGs written
        - failed: Number of failures
        - errors: List of (stage, message) tuples
        - duration: Total pipeline duration in seconds
    """
    pipeline_start = datetime.now()
    controller = controller or WorkflowController()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    results: Dict[str, Any] = {
        'total_cards': 0,
        'generated': 0,
        'exported': 0,
        'failed': 0,
        'errors': [],
        'duration': 0.0,
    }

    logger.info("=" * 80)
    logger.info("Knowledge Card Designer - Starting")
    logger.info(f"Style: {style} | Output: {output_dir} | PNG: {export_png}")
    logger.info("=" * 80)

    # Step 1: Blueprint
    if not await controller.analyze(text, style):
        message = controller.error or "Input text is empty"
        logger.error(f"Analysis failed: {message}")
        results['failed'] = 1
        results['errors'].append(('analyze', message))
        results['duration'] = (datetime.now() - pipeline_start).total_seconds()
        return results

    blueprint = controller.blueprint
    (output_dir / 'blueprint.json').write_text(blueprint.to_json(), encoding='utf-8')

    total = blueprint.card_count
    count = min(max_cards, total) if max_cards is not None else total
    results['total_cards'] = total

    cost_estimate = estimate_cost(count)
    logger.info(f"Blueprint: style={blueprint.style}, {total} cards, rendering {count}")
    logger.info(f"Cost estimate: ${cost_estimate['total_cost']:.4f}")

    # Step 2/3: Cards
    for index in range(count):
        if not await controller.generate_card(index):
            message = controller.error or "Card generation failed"
            logger.error(f"Card {index + 1}/{count} failed: {message}")
            results['failed'] += 1
            results['errors'].append((f'card-{index + 1}', message))
            continue

        card = controller.current_card
        html_path = output_dir / f'card-{index + 1:02d}.html'
        html_path.write_text(card.html, encoding='utf-8')
        results['generated'] += 1
        logger.info(f"Card {index + 1}/{count}: {card.title} -> {html_path}")

        if export_png:
            try:
                png_path = await controller.export_image(output_dir)
            except ExportError as e:
                logger.error(f"PNG export failed for card {index + 1}: {e}")
                results['failed'] += 1
                results['errors'].append((f'export-{index + 1}', describe_error(e)))
            else:
                if png_path:
                    results['exported'] += 1

    results['duration'] = (datetime.now() - pipeline_start).total_seconds()

    logger.info("=" * 80)
    logger.info("Knowledge Card Designer - Complete")
    logger.info(f"Generated: {results['generated']}/{count}")
    logger.info(f"Exported: {results['exported']}")
    logger.info(f"Failed: {results['failed']}")
    logger.info(f"Duration: {results['duration']:.1f}s")
    logger.info("=" * 80)

    return results


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def main(argv=None):
    """Main entry point for CLI"""
    parser = argparse.ArgumentParser(
        description='Turn text into a series of AI-designed knowledge cards'
    )
    parser.add_argument(
        '--text-file',
        type=Path,
        help='File with the source text (reads stdin if omitted)'
    )
    parser.add_argument(
        '--style',
        default=AUTO_STYLE,
        help=f"Visual style: {AUTO_STYLE} or one of {', '.join(STYLE_VOCABULARY)} (default: {AUTO_STYLE})"
    )
    parser.add_argument(
        '--output-dir',
        type=Path,
        default=Path('cards'),
        help='Directory for blueprint.json and card files (default: cards)'
    )
    parser.add_argument(
        '--cards',
        type=_positive_int,
        help='Render only the first N cards'
    )
    parser.add_argument(
        '--png',
        action='store_true',
        help='Also export each card to PNG (requires playwright)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.text_file:
        text = args.text_file.read_text(encoding='utf-8')
    else:
        text = sys.stdin.read()

    if not text.strip():
        logger.error("No input text provided")
        sys.exit(1)

    try:
        results = asyncio.run(run_pipeline(
            text=text,
            style=args.style,
            output_dir=args.output_dir,
            max_cards=args.cards,
            export_png=args.png,
        ))

        if results['failed'] > 0:
            logger.error(f"Pipeline completed with {results['failed']} failures")
            sys.exit(1)
        else:
            logger.info("Pipeline completed successfully!")
            sys.exit(0)

    except Exception as e:
        logger.exception(f"Pipeline failed with exception: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
