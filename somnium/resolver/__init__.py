"""Object resolver module.

Binds object phrases typed by the player to things in the current scene:
- Pronoun resolution
- Collective references ("all")
- Exact, prefix and word-prefix name matching
"""

from somnium.resolver.object_resolver import ObjectResolver, is_exact_match, matches_name

__all__ = [
    "ObjectResolver",
    "is_exact_match",
    "matches_name",
]
