"""Query rewriting to improve retrieval recall.

Rulebooks state rules ("The first player to reach 10 points wins") while
players ask questions ("How do I win?"). The enhancer appends statement-like
rewrites of common question forms plus game-domain synonyms, keeping the
original query in front so nothing the user typed is lost.
"""

from collections.abc import Callable

# (prefix, variants built from the remainder of the query)
QUESTION_REWRITES: tuple[tuple[str, Callable[[str], list[str]]], ...] = (
    ("how do i ", lambda rest: [rest, f"rules for {rest}", f"instructions {rest}"]),
    ("what happens ", lambda rest: [f"when {rest}", f"rules {rest}"]),
    ("can i ", lambda rest: [f"player may {rest}", f"allowed to {rest}"]),
    ("may i ", lambda rest: [f"player may {rest}", f"allowed to {rest}"]),
)

DOMAIN_SYNONYMS: dict[str, tuple[str, ...]] = {
    "win": ("victory", "winning condition", "end of game"),
    "lose": ("defeat", "elimination", "losing condition"),
    "turn": ("round", "phase", "action"),
    "move": ("movement", "position", "travel"),
    "attack": ("combat", "fight", "battle"),
    "defend": ("defense", "block", "protect"),
    "points": ("score", "scoring", "victory points"),
    "cards": ("hand", "deck", "draw"),
    "dice": ("roll", "die", "random"),
    "setup": ("preparation", "initial", "starting"),
    "end": ("finish", "conclusion", "final"),
}

_TRAILING_PUNCTUATION = "?!. "


class QueryEnhancer:
    """Rewrites a natural-language question for embedding search.

    Deterministic and side-effect free. Running it on its own output does not
    corrupt the text, though the output is not guaranteed to be stable.

    Example:
        QueryEnhancer().enhance("How do I win?")
        # "how do i win? win rules for win instructions win victory winning condition end of game"
    """

    def __init__(
        self,
        rewrites: tuple[tuple[str, Callable[[str], list[str]]], ...] = QUESTION_REWRITES,
        synonyms: dict[str, tuple[str, ...]] | None = None,
    ) -> None:
        self.rewrites = rewrites
        self.synonyms = DOMAIN_SYNONYMS if synonyms is None else synonyms

    def enhance(self, query: str) -> str:
        """Return the lower-cased query followed by rewrites and synonym terms."""
        lowered = " ".join(query.lower().split())
        if not lowered:
            return ""

        parts = [lowered]
        for prefix, build in self.rewrites:
            if lowered.startswith(prefix):
                rest = lowered[len(prefix) :].rstrip(_TRAILING_PUNCTUATION)
                if rest:
                    parts.extend(build(rest))

        for concept, terms in self.synonyms.items():
            if concept in lowered:
                parts.extend(term for term in terms if term not in lowered)

        return " ".join(parts)
