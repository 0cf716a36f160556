"""Keyword-based document type classifier."""

from typing import Sequence

from grantflow.schemas.extraction import UNKNOWN_DOCUMENT_TYPE, ClassificationResult
from grantflow.services.parser.constants import DOCUMENT_TYPES, DocumentTypeConfig
from grantflow.services.parser.extract.common import calculate_confidence
from grantflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


def classify_document(
    text: str,
    document_types: Sequence[DocumentTypeConfig] = DOCUMENT_TYPES,
) -> ClassificationResult:
    """Pick the most likely document type for raw text.

    Each type is scored with ``calculate_confidence`` against its keyword
    dictionary and qualifies only if the score reaches its minimum confidence.
    The highest qualifying score wins. ``document_types`` is a priority list:
    on equal scores the type listed first is kept.

    Args:
        text: Raw (non-normalized) document text
        document_types: Ordered type configurations to score against

    Returns:
        ClassificationResult with the qualifying scores
    """
    scores = {}
    for config in document_types:
        confidence = calculate_confidence(text, config.keywords)
        if confidence >= config.min_confidence:
            scores[config.type_id] = confidence

    best_type = UNKNOWN_DOCUMENT_TYPE
    best_score = 0.0
    for config in document_types:
        score = scores.get(config.type_id)
        if score is None:
            continue
        if best_type == UNKNOWN_DOCUMENT_TYPE or score > best_score:
            best_type = config.type_id
            best_score = score

    LOGGER.debug(
        f"Classified document as {best_type}",
        extra={"scores": scores, "confidence": best_score},
    )

    return ClassificationResult(type=best_type, confidence=best_score, scores=scores)
