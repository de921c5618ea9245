"""Header-aware document segmentation.

Responsibilities:
- Split extracted document text into sections keyed by academic headers.
- Greedily pack each section's lines into chunks bounded by a target size.
- Keep segmentation deterministic and lossless apart from paragraph whitespace.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

from ..models.datatypes import TextChunk

DEFAULT_TARGET_CHARS = 3500


@dataclass(frozen=True, slots=True)
class DocumentSection:
    """One header-delimited section of a document.

    Attributes:
        title: Header text with trailing punctuation stripped, or the sentinel title.
        paragraphs: Trimmed non-empty paragraphs, starting with the header itself.
    """

    title: str
    paragraphs: tuple[str, ...]

    @property
    def content(self) -> str:
        """Return section paragraphs joined by blank lines."""

        return "\n\n".join(self.paragraphs)


class SemanticSegmenter:
    """Split documents into titled, size-bounded narration chunks."""

    SENTINEL_TITLE = "Start of Document"
    _HEADER_MAX_CHARS = 100
    _HEADER_KEYWORDS = (
        "abstract",
        "introduction",
        "background",
        "literature review",
        "methods",
        "methodology",
        "results",
        "discussion",
        "conclusion",
        "references",
        "appendix",
    )
    _HEADER_RE = re.compile(
        r"^(?:" + "|".join(re.escape(keyword) for keyword in _HEADER_KEYWORDS) + r")",
        re.IGNORECASE | re.MULTILINE,
    )
    _PARAGRAPH_BREAK_RE = re.compile(r"\n[ \t]*\n")
    _TRAILING_TITLE_PUNCTUATION_RE = re.compile(r"[.:]+$")

    def segment(self, document: str, target_chars: int = DEFAULT_TARGET_CHARS) -> list[TextChunk]:
        """Split a document into ordered chunks.

        Args:
            document: Extracted plain text.
            target_chars: Maximum chunk length in characters. A single line longer
                than this becomes its own oversized chunk.

        Returns:
            Ordered chunk list; empty for blank input or a non-positive target.
        """

        if target_chars <= 0:
            return []

        chunks: list[TextChunk] = []
        for section in self.sections(document):
            chunks.extend(self._section_chunks(section, target_chars))
        return chunks

    def sections(self, document: str) -> list[DocumentSection]:
        """Group paragraphs into header-delimited sections in document order."""

        sections: list[DocumentSection] = []
        current_title = self.SENTINEL_TITLE
        buffer: list[str] = []

        for paragraph in self.paragraphs(document):
            if self.is_header(paragraph):
                if buffer:
                    sections.append(DocumentSection(current_title, tuple(buffer)))
                current_title = self._TRAILING_TITLE_PUNCTUATION_RE.sub("", paragraph)
                buffer = [paragraph]
            else:
                buffer.append(paragraph)

        if buffer:
            sections.append(DocumentSection(current_title, tuple(buffer)))
        return sections

    def paragraphs(self, document: str) -> list[str]:
        """Return trimmed non-empty paragraphs split on blank lines."""

        normalized = document.replace("\r\n", "\n").replace("\r", "\n")
        return [
            paragraph.strip()
            for paragraph in self._PARAGRAPH_BREAK_RE.split(normalized)
            if paragraph.strip()
        ]

    def is_header(self, paragraph: str) -> bool:
        """Return whether a trimmed paragraph is a short structural header."""

        return len(paragraph) < self._HEADER_MAX_CHARS and bool(
            self._HEADER_RE.search(paragraph)
        )

    def _section_chunks(self, section: DocumentSection, target_chars: int) -> list[TextChunk]:
        """Emit one chunk for a fitting section or greedy line-packed parts otherwise."""

        content = section.content.strip()
        if not content:
            return []
        if len(content) <= target_chars:
            return [TextChunk(title=section.title, text=content)]

        parts = self._pack_lines(content.split("\n"), target_chars)
        if len(parts) == 1:
            return [TextChunk(title=section.title, text=parts[0])]
        return [
            TextChunk(title=f"{section.title} (Part {number})", text=text)
            for number, text in enumerate(parts, start=1)
        ]

    def _pack_lines(self, lines: list[str], target_chars: int) -> list[str]:
        """Greedily accumulate lines into parts no longer than the target when possible."""

        parts: list[str] = []
        buffer: list[str] = []
        buffer_length = 0

        for line in lines:
            if not buffer and not line.strip():
                continue
            added_length = len(line) + (1 if buffer else 0)
            if buffer and buffer_length + added_length > target_chars:
                parts.append("\n".join(buffer).strip())
                buffer = [line] if line.strip() else []
                buffer_length = len(line) if buffer else 0
                continue
            buffer.append(line)
            buffer_length += added_length

        remainder = "\n".join(buffer).strip()
        if remainder:
            parts.append(remainder)
        return parts


def semantic_split(document: str, target_chars: int = DEFAULT_TARGET_CHARS) -> list[TextChunk]:
    """Split a document into titled chunks with the default segmenter."""

    return SemanticSegmenter().segment(document, target_chars)
