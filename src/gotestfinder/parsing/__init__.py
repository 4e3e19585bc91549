"""Lexical Go test discovery: line classification, brace tracking, extraction."""

from gotestfinder.parsing.blocks import BlockDepthTracker, BodyExtent, find_body_extent
from gotestfinder.parsing.extractor import DiscoveryError, extract_tests, parse_test_file
from gotestfinder.parsing.lexical import find_subtest_names, match_test_declaration

__all__ = [
    "BlockDepthTracker",
    "BodyExtent",
    "DiscoveryError",
    "extract_tests",
    "find_body_extent",
    "find_subtest_names",
    "match_test_declaration",
    "parse_test_file",
]
