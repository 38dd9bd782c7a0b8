"""Catalog duplicate detection using fuzzy matching."""

from typing import List, Tuple
import re

from fuzzywuzzy import fuzz

from apps.catalogs.models import Concept, Subconcept, Description


# Thresholds for fuzzy matching
EXACT_MATCH_THRESHOLD = 100
MEDIUM_SIMILARITY_THRESHOLD = 80

MAX_RESULTS = 10

# Sibling scope: names only need to be unique under the same parent
PARENT_FIELDS = {
    Concept: 'general_id',
    Subconcept: 'concept_id',
    Description: 'concept_id',
}


def normalize_name(text: str) -> str:
    """
    Normalize a catalog name for comparison.

    Lowercases, collapses whitespace and drops punctuation, so
    "Arbitraje  (Liga)" and "arbitraje liga" compare equal.
    """
    text = (text or '').lower().strip()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'\s+', ' ', text)
    return text


def find_similar_items(
    model,
    *,
    name: str,
    parent_id=None,
    exclude_id=None,
    threshold: int = MEDIUM_SIMILARITY_THRESHOLD
) -> List[Tuple[object, int, str]]:
    """
    Find active catalog entries whose name looks like ``name``.

    Concepts are compared with the other concepts of the same general;
    subconcepts and descriptions with their siblings under the same concept.
    Generals and providers are compared with every active entry.

    Args:
        model: General, Concept, Subconcept, Description or Provider
        name: Candidate name
        parent_id: General (for concepts) or concept (for subconcepts
            and descriptions)
        exclude_id: Entry to leave out, e.g. the one being renamed
        threshold: Minimum similarity score (0-100)

    Returns:
        List of (item, similarity_score, match_type) tuples, best first.
        match_type is 'exact' or 'fuzzy'.
    """
    name_norm = normalize_name(name)
    if not name_norm:
        return []

    queryset = model.objects.filter(is_active=True)
    parent_field = PARENT_FIELDS.get(model)
    if parent_field and parent_id:
        queryset = queryset.filter(**{parent_field: parent_id})
    if exclude_id:
        queryset = queryset.exclude(id=exclude_id)

    candidates = []
    for item in queryset.only('id', 'name'):
        item_norm = normalize_name(item.name)
        if item_norm == name_norm:
            candidates.append((item, EXACT_MATCH_THRESHOLD, 'exact'))
            continue

        # token_sort_ratio tolerates reordered words ("Liga local" / "Local liga")
        score = max(
            fuzz.ratio(name_norm, item_norm),
            fuzz.token_sort_ratio(name_norm, item_norm),
        )
        if score >= threshold:
            candidates.append((item, score, 'fuzzy'))

    candidates.sort(key=lambda x: (-x[1], x[0].name))
    return candidates[:MAX_RESULTS]
