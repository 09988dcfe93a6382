"""Test package for the spatial trainer.

Covers the puzzle generators (voxel structures, viewpoints, node layouts and
edge routing), answer validation and the answer-key batch run. Everything
runs headlessly; execute ``pytest`` from the project root.
"""
