"""Budgeted, deduplicating formatter for prioritized content sections."""

from collections.abc import Iterable, Sequence

from vapi_memory.exceptions import ValidationError
from vapi_memory.models.context import (
    ContentSection,
    FormatOptions,
    FormattedMetadata,
    FormattedOutput,
)
from vapi_memory.utils.similarity import calculate_similarity
from vapi_memory.utils.token_counter import estimate_tokens

DEFAULT_SIMILARITY_THRESHOLD = 0.85


class ContextFormatter:
    """Rank, deduplicate and pack sections into a token budget.

    Sections are ordered by descending priority, ties broken by descending
    id. Exact duplicates (case and surrounding whitespace ignored) and
    near-duplicates (word overlap above the similarity threshold) are
    dropped in favour of the earlier section. Remaining sections are packed
    greedily in order; a section that does not fit is skipped and later,
    smaller sections are still tried.
    """

    def __init__(self, similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD) -> None:
        """Initialize context formatter.

        Args:
            similarity_threshold: Similarity above which a section counts as
                a near-duplicate (0.0-1.0)
        """
        if not 0.0 <= similarity_threshold <= 1.0:
            raise ValidationError("similarity_threshold must be between 0.0 and 1.0")
        self.similarity_threshold = similarity_threshold

    def format(
        self,
        sections: Sequence[ContentSection],
        options: FormatOptions,
    ) -> FormattedOutput:
        """Select and render sections within the token budget.

        Args:
            sections: Candidate sections (not modified)
            options: Budget and rendering options

        Returns:
            Rendered text, tokens used, included sections and, when
            ``options.include_metadata`` is set, selection statistics
        """
        ranked = self._sort(sections)
        deduplicated = self._deduplicate(ranked)
        included, excluded, used_tokens = self._fit_to_budget(
            deduplicated, options.max_tokens
        )

        parts: list[str] = []
        for section in included:
            line = section.content
            if options.include_metadata:
                line += f" [{section.source}]"
            if options.include_tokens:
                line += f" [{section.tokens}t]"
            parts.append(line + options.separator)

        if options.include_tokens:
            parts.append(f"\nTotal: {used_tokens}/{options.max_tokens} tokens")

        metadata = None
        if options.include_metadata:
            metadata = FormattedMetadata(
                total_items=len(deduplicated),
                included_items=len(included),
                excluded_items=len(excluded),
                sources=list(dict.fromkeys(section.source for section in included)),
            )

        return FormattedOutput(
            formatted="".join(parts).strip(),
            used_tokens=used_tokens,
            sections=included,
            metadata=metadata,
        )

    def _sort(self, sections: Sequence[ContentSection]) -> list[ContentSection]:
        return sorted(sections, key=lambda s: (s.priority, s.id), reverse=True)

    def _deduplicate(self, sections: list[ContentSection]) -> list[ContentSection]:
        """Drop exact and near-duplicate sections, keeping the first seen.

        Near-duplicate detection compares each candidate against every
        accepted section, so cost grows quadratically with input size.
        """
        seen: set[str] = set()
        deduplicated: list[ContentSection] = []

        for section in sections:
            normalized = section.content.lower().strip()
            if normalized in seen:
                continue

            if any(
                calculate_similarity(kept.content, section.content)
                > self.similarity_threshold
                for kept in deduplicated
            ):
                continue

            seen.add(normalized)
            deduplicated.append(section)

        return deduplicated

    def _fit_to_budget(
        self,
        sections: list[ContentSection],
        max_tokens: int,
    ) -> tuple[list[ContentSection], list[ContentSection], int]:
        """Greedily pack sections in order without backtracking.

        Returns:
            Tuple of (included, excluded, used tokens)
        """
        included: list[ContentSection] = []
        excluded: list[ContentSection] = []
        used_tokens = 0

        for section in sections:
            if used_tokens + section.tokens > max_tokens:
                excluded.append(section)
                continue
            included.append(section)
            used_tokens += section.tokens

        return included, excluded, used_tokens


def format_sections(
    sections: Sequence[ContentSection],
    options: FormatOptions,
) -> FormattedOutput:
    """Format sections with the default near-duplicate threshold."""
    return ContextFormatter().format(sections, options)


def create_section(
    id: str,
    content: str,
    source: str,
    priority: int = 1,
) -> ContentSection:
    """Build a section, estimating its token cost from the content."""
    return ContentSection(
        id=id,
        content=content,
        priority=priority,
        tokens=estimate_tokens(content),
        source=source,
    )


def create_sections(
    items: Iterable[tuple[str, str]],
    source: str,
    priority: int = 1,
) -> list[ContentSection]:
    """Build sections sharing a source and priority from (id, content) pairs."""
    return [create_section(id, content, source, priority) for id, content in items]
