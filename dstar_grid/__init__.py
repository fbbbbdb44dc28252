"""
dstar_grid: incremental D* Lite replanning on a fixed-size grid.
"""

__version__ = "1.0.0"
