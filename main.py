#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

Drop images into ``images/`` and run:

    python main.py batch

Or convert one file:

    python main.py single my_photo.jpg --palette "Pico-8" --dithering 6
    python main.py single my_photo.jpg --palette auto
"""

from lowreslove.cli import app

if __name__ == "__main__":
    app()
