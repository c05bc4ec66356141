"""Sentence splitter implementations."""

import pysbd

from rulekeeper.chunker.base import SentenceSplitter

SENTENCE_TERMINATORS = ".!?"
CLOSING_CHARACTERS = "\"')]}”’"
# Characters that may precede an abbreviation inside its token, e.g. "(e.g."
TOKEN_OPENERS = "\"'([{“‘"

ABBREVIATIONS = frozenset(
    {"vs", "etc", "e.g", "i.e", "mr", "mrs", "ms", "dr", "inc", "ltd", "approx", "cf"}
)
ABBREVIATION_LOOKBACK = 10


class HeuristicSentenceSplitter(SentenceSplitter):
    """Character-scanning sentence splitter tuned for rulebook text.

    A ".", "!" or "?" ends a sentence unless the period belongs to a known
    abbreviation, sits between two digits, or closes a numeric list marker
    ("3. Draw a card.") at the start of a sentence. Closing quotes and
    brackets that follow a sentence end stay with that sentence.
    """

    def __init__(
        self,
        min_length: int = 10,
        abbreviations: frozenset[str] = ABBREVIATIONS,
    ) -> None:
        """Initialize the splitter.

        Args:
            min_length: Sentences whose trimmed length is at or below this
                        are discarded.
            abbreviations: Lower-case abbreviations without their final period.
        """
        self.min_length = min_length
        self.abbreviations = abbreviations

    def split(self, text: str) -> list[str]:
        sentences: list[str] = []
        start = 0
        i = 0
        n = len(text)

        while i < n:
            char = text[i]
            if char not in SENTENCE_TERMINATORS or (
                char == "." and not self._ends_sentence(text, i, start)
            ):
                i += 1
                continue

            end = i + 1
            while end < n and (
                text[end] in CLOSING_CHARACTERS or text[end] in SENTENCE_TERMINATORS
            ):
                end += 1

            self._keep(sentences, text[start:end])
            start = end
            i = end

        self._keep(sentences, text[start:])
        return sentences

    def _keep(self, sentences: list[str], candidate: str) -> None:
        sentence = candidate.strip()
        if len(sentence) > self.min_length:
            sentences.append(sentence)

    def _ends_sentence(self, text: str, i: int, sentence_start: int) -> bool:
        """Decide whether the period at text[i] ends the current sentence."""
        before = text[i - 1] if i > 0 else ""
        after = text[i + 1] if i + 1 < len(text) else ""

        # Decimal numbers: "2.5 spaces"
        if before.isdigit() and after.isdigit():
            return False

        if before.isdigit() and self._is_list_marker(text, i, sentence_start):
            return False

        return not self._is_abbreviation(text, i)

    def _is_list_marker(self, text: str, i: int, sentence_start: int) -> bool:
        digits_start = i
        while digits_start > sentence_start and text[digits_start - 1].isdigit():
            digits_start -= 1
        return not text[sentence_start:digits_start].strip()

    def _is_abbreviation(self, text: str, i: int) -> bool:
        window = text[max(0, i - ABBREVIATION_LOOKBACK) : i]
        words = window.split()
        if not words or window[-1].isspace():
            return False
        token = words[-1].lstrip(TOKEN_OPENERS).lower()
        if token in self.abbreviations:
            return True

        # First period of a dotted abbreviation: "e" + ".g." -> "e.g"
        end = i
        while end < len(text) and not text[end].isspace():
            end += 1
        trailing = SENTENCE_TERMINATORS + CLOSING_CHARACTERS + ",;:"
        dotted = (token + text[i:end]).lower().rstrip(trailing)
        return dotted in self.abbreviations


class PySBDSentenceSplitter(SentenceSplitter):
    """Sentence splitter backed by pySBD (Python Sentence Boundary Disambiguation).

    Handles more edge cases than the heuristic splitter at the cost of speed.
    """

    def __init__(self, min_length: int = 10, language: str = "en") -> None:
        """Initialize the splitter.

        Args:
            min_length: Sentences whose trimmed length is at or below this
                        are discarded.
            language: Language code for segmentation (default: "en").
        """
        self.min_length = min_length
        self.segmenter = pysbd.Segmenter(language=language, clean=False)

    def split(self, text: str) -> list[str]:
        text = text.strip()
        if not text:
            return []
        sentences = (sentence.strip() for sentence in self.segmenter.segment(text))
        return [s for s in sentences if len(s) > self.min_length]
