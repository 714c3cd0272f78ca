"""Platform resolution for Tag Intake.

Submodules:
- similarity: key normalization, Levenshtein distance, similarity score
- catalog: immutable platform catalog with alias index and config loading
- resolver: exact-then-fuzzy resolution and ranked suggestions
"""

from tag_intake.resolution.catalog import (
    DEFAULT_PLATFORMS,
    PlatformCatalog,
    load_catalog,
    read_catalog_config,
    save_catalog_config,
)
from tag_intake.resolution.resolver import PlatformResolver, PlatformSuggestion, ResolutionResult
from tag_intake.resolution.similarity import levenshtein_distance, normalize_key, similarity

__all__ = [
    "DEFAULT_PLATFORMS",
    "PlatformCatalog",
    "PlatformResolver",
    "PlatformSuggestion",
    "ResolutionResult",
    "levenshtein_distance",
    "load_catalog",
    "normalize_key",
    "read_catalog_config",
    "save_catalog_config",
    "similarity",
]
