"""
Latitude-Longitude Net - Graticule generation for globe scenes.

Two stages:
- Calculate: sample a lat/long grid on a sphere and rotate it into the scene axes
- Plot: hand every retained line to a line renderer under one parent node

Usage:
    python src/plot_net.py --lat-step 15 --lon-step 15 --formats glb csv
"""

__version__ = "1.0.0"
