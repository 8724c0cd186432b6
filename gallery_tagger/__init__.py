"""
Gallery Tagger

Offline batch tools for a static vehicle gallery: identifies the car in each
photo with a vision-capable language model, copies recognised photos under
normalised names and writes an HTML gallery fragment, then builds responsive
AVIF/WebP/JPEG variants of the results.
"""

__version__ = "1.0.0"
__author__ = "Gallery Tagger Team"
