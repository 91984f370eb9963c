# gap_roadmap/analysis/__init__.py
"""
Gap analysis: evidence gathering, confidence scoring, and the spec,
documentation and completeness analyzers.
"""
