"""Token estimation utilities.

Counts are approximations made without a tokenizer. Two estimates are
computed and the larger one is used, so the result errs on the side of
overcounting.
"""

import math
from collections.abc import Iterable

from vapi_memory.models.context import BudgetedText

CHARS_PER_TOKEN = 4
TOKENS_PER_WORD = 0.75


def estimate_tokens(text: str | None) -> int:
    """Estimate the token count of a text span.

    Args:
        text: Text to estimate tokens for

    Returns:
        Estimated token count (0 for empty or missing text)
    """
    if not text:
        return 0

    # Character-based estimate
    char_estimate = math.ceil(len(text) / CHARS_PER_TOKEN)

    # Word-based estimate
    word_count = len(text.split())
    word_estimate = math.ceil(word_count * TOKENS_PER_WORD)

    return max(char_estimate, word_estimate)


def estimate_multiple(texts: Iterable[str]) -> int:
    """Sum of the token estimates of several texts.

    Args:
        texts: Texts to estimate

    Returns:
        Total estimated token count
    """
    return sum(estimate_tokens(text) for text in texts)


def format_within_budget(
    texts: Iterable[str],
    budget: int,
    separator: str = "\n",
) -> BudgetedText:
    """Join texts in order until the next one would exceed the budget.

    Unlike section formatting, selection stops at the first text that does
    not fit.

    Args:
        texts: Texts in priority order
        budget: Maximum total estimated tokens
        separator: String placed between included texts

    Returns:
        Joined text, tokens used and number of texts included
    """
    used_tokens = 0
    included: list[str] = []

    for text in texts:
        token_count = estimate_tokens(text)
        if used_tokens + token_count > budget:
            break
        used_tokens += token_count
        included.append(text)

    return BudgetedText(
        formatted=separator.join(included),
        used_tokens=used_tokens,
        included_count=len(included),
    )
