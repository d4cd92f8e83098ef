"""
Review Text Validation - Post-Generation Identity Checks
=========================================================

Language models sometimes ignore the company name they were given and
write about "ABC Company" or a restaurant down the street. Generated
text goes through validate_review_text() before anyone sees it.

Pure functions only, so every rule can be tested without a model.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

# Placeholders and wrong-industry references seen in bad drafts
DEFAULT_DENY_LIST = (
    "[company name]",
    "[business name]",
    "[your company]",
    "abc company",
    "xyz company",
    "acme corp",
    "example company",
    "lorem ipsum",
    "restaurant",
    "hotel",
    "car dealership",
    "law firm",
    "dental clinic",
    "hair salon",
)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation pass."""
    ok: bool
    error_kind: Optional[str] = None
    reason: str = ""
    term: str = ""


VALID = ValidationResult(ok=True)


def _normalize(text: str) -> str:
    return " ".join(text.lower().split())


def mentions_company(text: str, company_name: str) -> bool:
    """Case-insensitive substring match, whitespace-insensitive."""
    name = _normalize(company_name)
    return bool(name) and name in _normalize(text)


def _term_pattern(term: str) -> re.Pattern:
    # Word boundaries only where the term itself starts/ends with a word char
    escaped = re.escape(term)
    prefix = r"(?<!\w)" if term[:1].isalnum() else ""
    suffix = r"(?!\w)" if term[-1:].isalnum() else ""
    return re.compile(prefix + escaped + suffix, re.IGNORECASE)


def find_foreign_entity(
    text: str,
    company_name: str,
    deny_list: Iterable[str] = DEFAULT_DENY_LIST,
    allowed_context: str = "",
) -> Optional[str]:
    """
    Return the first deny-listed term found in text, or None.

    Terms contained in the real company name (or in allowed_context,
    typically the business description) are skipped.
    """
    name = _normalize(company_name)
    context = _normalize(allowed_context)
    body = _normalize(text)

    for term in deny_list:
        term_norm = _normalize(term)
        if not term_norm:
            continue
        if term_norm in name or (context and term_norm in context):
            continue
        if _term_pattern(term_norm).search(body):
            return term
    return None


def validate_review_text(
    text: str,
    company_name: str,
    deny_list: Iterable[str] = DEFAULT_DENY_LIST,
    allowed_context: str = "",
) -> ValidationResult:
    """
    Check a generated review before it is shown to the customer.

    Rules, in order:
    1. The company name must appear (case-insensitive).
    2. No deny-listed term may appear unless the real name contains it.
    """
    if not text or not text.strip():
        return ValidationResult(
            ok=False,
            error_kind="identity_mismatch",
            reason="Generated text is empty",
        )

    if not mentions_company(text, company_name):
        return ValidationResult(
            ok=False,
            error_kind="identity_mismatch",
            reason=f"Generated text does not mention '{company_name}'",
        )

    term = find_foreign_entity(text, company_name, deny_list, allowed_context)
    if term:
        return ValidationResult(
            ok=False,
            error_kind="foreign_entity",
            reason=f"Generated text references '{term}'",
            term=term,
        )

    return VALID
