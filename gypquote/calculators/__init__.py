"""
Deterministic pricing engine.

Pure Python math over in-memory records. No I/O, no logging on the hot path.
Given an area's entered dimensions and selections, produce a fully priced
AreaMeasurement; given priced areas, produce record totals.
"""
