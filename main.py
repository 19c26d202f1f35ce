#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

Put tile pictures into ``palette/`` and run:

    python main.py generate -p palette -s 16 -i photo.jpg -o output/mosaic.png

Or inspect what the palette folder contains:

    python -m photo_mosaic.cli palette -p palette --tile-size 16
"""

from photo_mosaic.cli import app

if __name__ == "__main__":
    app()
