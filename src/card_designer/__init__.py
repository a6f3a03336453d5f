"""
Knowledge Card Designer

Turns raw text into a sequence of styled, image-exportable knowledge cards:
- Blueprint analysis (style, colours, fonts, card outlines) via JSON-mode completion
- Per-card HTML layout generation (700x1160, self-contained)
- Session workflow with PNG export
"""

__version__ = "1.0.0"
