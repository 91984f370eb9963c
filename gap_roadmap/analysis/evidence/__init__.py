# gap_roadmap/analysis/evidence/__init__.py
"""Evidence providers: filesystem and source scanners that produce Evidence records."""

from .base import EvidenceProvider, EvidenceRequest
from .files import FileSearcher, is_test_file
from .providers import (
    DeclaredImplementationProvider,
    FilenameEvidenceProvider,
    RelatedFeatureProvider,
    SourceStructureProvider,
    TestCoverageProvider,
)
from .source_parser import FunctionInfo, ParsedSource, parse_source

__all__ = [
    "DeclaredImplementationProvider",
    "EvidenceProvider",
    "EvidenceRequest",
    "FileSearcher",
    "FilenameEvidenceProvider",
    "FunctionInfo",
    "ParsedSource",
    "RelatedFeatureProvider",
    "SourceStructureProvider",
    "TestCoverageProvider",
    "is_test_file",
    "parse_source",
]
