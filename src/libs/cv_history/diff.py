"""
Word-level diffing of CV snapshots.

``word_diff`` aligns two texts with a longest-common-subsequence table over
whitespace-separated words. ``diff_versions`` runs it across the summary and
each experience description and compares the skill lists as name sets.
"""

from typing import Any, Dict, List, Mapping, Optional

import config as cfg
from src.logging import logger

from .models import DiffKind, DiffToken, SectionDiff, SectionKind


def tokenize(text: Optional[str]) -> List[str]:
    """Split text into words. Empty or whitespace-only text gives no words."""
    return (text or '').split()


def _merge(ops: List[DiffToken]) -> List[DiffToken]:
    merged: List[DiffToken] = []
    for op in ops:
        if merged and merged[-1].kind == op.kind:
            merged[-1].text += ' ' + op.text
        else:
            merged.append(DiffToken(op.kind, op.text))
    return merged


def word_diff(old_text: Optional[str], new_text: Optional[str],
              max_tokens: int = None) -> List[DiffToken]:
    """
    Return word-level diff tokens turning ``old_text`` into ``new_text``.

    Args:
        old_text: Previous text, may be empty or None
        new_text: Current text, may be empty or None
        max_tokens: Per-side word limit for the LCS table. Above it the whole
            old text is reported removed and the whole new text added.

    Returns:
        Tokens in edit-script order, with adjacent same-kind runs merged.
    """
    max_tokens = cfg.WORD_DIFF_MAX_TOKENS if max_tokens is None else max_tokens
    old_words = tokenize(old_text)
    new_words = tokenize(new_text)

    if not old_words and not new_words:
        return []

    m = len(old_words)
    n = len(new_words)

    if m > max_tokens or n > max_tokens:
        logger.debug(f"Word diff input too large ({m}/{n} words), using whole-text fallback")
        tokens = []
        if old_text:
            tokens.append(DiffToken(DiffKind.REMOVE, old_text))
        if new_text:
            tokens.append(DiffToken(DiffKind.ADD, new_text))
        return tokens

    dp = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if old_words[i - 1] == new_words[j - 1]:
                dp[i][j] = dp[i - 1][j - 1] + 1
            else:
                dp[i][j] = max(dp[i - 1][j], dp[i][j - 1])

    # Traceback; on ties an addition is preferred over a removal.
    ops: List[DiffToken] = []
    i, j = m, n
    while i > 0 or j > 0:
        if i > 0 and j > 0 and old_words[i - 1] == new_words[j - 1]:
            ops.append(DiffToken(DiffKind.EQUAL, old_words[i - 1]))
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or dp[i][j - 1] >= dp[i - 1][j]):
            ops.append(DiffToken(DiffKind.ADD, new_words[j - 1]))
            j -= 1
        else:
            ops.append(DiffToken(DiffKind.REMOVE, old_words[i - 1]))
            i -= 1

    ops.reverse()
    return _merge(ops)


def normalize_skill_name(raw: Any) -> str:
    """
    Coerce a skill record of any shape into its name.

    Handles plain strings, ``{"name": "Go"}``, ``{"name": {"name": "Go"}}``
    and records with a missing or odd ``name``. Never raises.
    """
    if raw is None:
        return ''
    if not isinstance(raw, Mapping):
        if hasattr(raw, 'model_dump'):
            raw = raw.model_dump()
        else:
            return str(raw)
    name = raw.get('name')
    if isinstance(name, str):
        return name
    if isinstance(name, Mapping):
        nested = name.get('name')
        return '' if nested is None else str(nested)
    return ''


def _as_dict(content: Any) -> Dict[str, Any]:
    if content is None:
        return {}
    if hasattr(content, 'model_dump'):
        return content.model_dump()
    return dict(content)


def _entry(entries: List[Any], idx: int) -> Dict[str, Any]:
    if idx >= len(entries):
        return {}
    entry = entries[idx]
    if not isinstance(entry, Mapping) and not hasattr(entry, 'model_dump'):
        return {}
    return _as_dict(entry)


def _experience_label(old_exp: Dict[str, Any], new_exp: Dict[str, Any], idx: int) -> str:
    position = new_exp.get('position') or old_exp.get('position')
    if not position:
        return f"Experience #{idx + 1}"
    company = new_exp.get('company') or old_exp.get('company') or ''
    return f"{position} @ {company}"


def _skill_changes(old_skills: List[Any], new_skills: List[Any]):
    old_names = [normalize_skill_name(s) for s in old_skills]
    new_names = [normalize_skill_name(s) for s in new_skills]
    old_set = {name.lower() for name in old_names}
    new_set = {name.lower() for name in new_names}

    added = [name for name in new_names if name and name.lower() not in old_set]
    removed = [name for name in old_names if name and name.lower() not in new_set]
    return added, removed


def diff_versions(old_content: Any, new_content: Any) -> List[SectionDiff]:
    """
    Compare two CV snapshots section by section.

    Args:
        old_content: Earlier CV content (mapping or ``ResumeContent``)
        new_content: Later CV content (mapping or ``ResumeContent``)

    Returns:
        One ``SectionDiff`` per changed section, in the order summary,
        experience entries by index, skills. Unchanged sections are omitted.
    """
    old = _as_dict(old_content)
    new = _as_dict(new_content)
    diffs: List[SectionDiff] = []

    old_summary = old.get('summary') or ''
    new_summary = new.get('summary') or ''
    if old_summary != new_summary:
        diffs.append(SectionDiff(
            section=SectionKind.SUMMARY,
            label='Summary',
            tokens=word_diff(old_summary, new_summary),
        ))

    old_experience = old.get('experience') or []
    new_experience = new.get('experience') or []
    for idx in range(max(len(old_experience), len(new_experience))):
        old_exp = _entry(old_experience, idx)
        new_exp = _entry(new_experience, idx)
        old_desc = old_exp.get('description') or ''
        new_desc = new_exp.get('description') or ''
        if old_desc != new_desc:
            diffs.append(SectionDiff(
                section=SectionKind.EXPERIENCE,
                label=_experience_label(old_exp, new_exp, idx),
                tokens=word_diff(old_desc, new_desc),
            ))

    added, removed = _skill_changes(old.get('skills') or [], new.get('skills') or [])
    if added or removed:
        diffs.append(SectionDiff(
            section=SectionKind.SKILLS,
            label='Skills',
            added=added,
            removed=removed,
        ))

    return diffs
