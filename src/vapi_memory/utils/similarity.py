"""Word-overlap similarity used for near-duplicate detection."""


def calculate_similarity(text_a: str, text_b: str) -> float:
    """Jaccard similarity of the case-folded word sets of two texts.

    Texts equal after trimming and lowercasing score 1.0 (two blank texts
    included); a blank text scores 0.0 against anything else.

    Args:
        text_a: First text
        text_b: Second text

    Returns:
        Similarity score (0.0-1.0)
    """
    normalized_a = text_a.strip().lower()
    normalized_b = text_b.strip().lower()

    if normalized_a == normalized_b:
        return 1.0
    if not normalized_a or not normalized_b:
        return 0.0

    words_a = set(normalized_a.split())
    words_b = set(normalized_b.split())

    return len(words_a & words_b) / len(words_a | words_b)
