import pytest

from src.libs.cv_history.diff import tokenize, word_diff
from src.libs.cv_history.models import DiffKind, DiffToken


def _kinds(tokens):
    return [t.kind for t in tokens]


def _side(tokens, kinds):
    return " ".join(t.text for t in tokens if t.kind in kinds)


# -------------------------------------------------------------
#  Tokenizer
# -------------------------------------------------------------
@pytest.mark.parametrize("text, expected", [
    ("", []),
    (None, []),
    ("   \n\t  ", []),
    ("hello", ["hello"]),
    ("  led   a\tteam\nof five ", ["led", "a", "team", "of", "five"]),
    ("Python, Go.", ["Python,", "Go."]),
])
def test_tokenize(text, expected):
    assert tokenize(text) == expected


# -------------------------------------------------------------
#  Basic cases
# -------------------------------------------------------------
def test_both_empty_gives_no_tokens():
    assert word_diff("", "") == []
    assert word_diff("  ", "\n") == []


def test_removed_text():
    assert word_diff("hello world", "") == [DiffToken(DiffKind.REMOVE, "hello world")]


def test_added_text():
    assert word_diff("", "hello") == [DiffToken(DiffKind.ADD, "hello")]


def test_identical_text_is_all_equal():
    text = "Built   data pipelines\nin Python"
    tokens = word_diff(text, text)
    assert tokens == [DiffToken(DiffKind.EQUAL, "Built data pipelines in Python")]


def test_case_sensitive_comparison():
    tokens = word_diff("Python", "python")
    assert DiffKind.EQUAL not in _kinds(tokens)


def test_middle_word_replaced():
    tokens = word_diff("the quick brown fox", "the slow brown fox")
    assert tokens == [
        DiffToken(DiffKind.EQUAL, "the"),
        DiffToken(DiffKind.REMOVE, "quick"),
        DiffToken(DiffKind.ADD, "slow"),
        DiffToken(DiffKind.EQUAL, "brown fox"),
    ]


def test_appended_words():
    tokens = word_diff("Led a team", "Led a team of five engineers")
    assert tokens == [
        DiffToken(DiffKind.EQUAL, "Led a team"),
        DiffToken(DiffKind.ADD, "of five engineers"),
    ]


def test_tie_break_prefers_addition_during_traceback():
    # Traceback runs backwards, so the preferred addition ends up last.
    assert word_diff("a b", "b a") == [
        DiffToken(DiffKind.REMOVE, "a"),
        DiffToken(DiffKind.EQUAL, "b"),
        DiffToken(DiffKind.ADD, "a"),
    ]


def test_disjoint_inputs():
    tokens = word_diff("alpha beta", "gamma delta")
    assert tokens == [
        DiffToken(DiffKind.REMOVE, "alpha beta"),
        DiffToken(DiffKind.ADD, "gamma delta"),
    ]


# -------------------------------------------------------------
#  Properties
# -------------------------------------------------------------
PAIRS = [
    ("Managed cloud infrastructure on AWS", "Managed cloud infrastructure on AWS and GCP"),
    ("Senior engineer with ten years", "Engineer with ten years of experience"),
    ("a b c d e f", "f e d c b a"),
    ("one two three", ""),
    ("", "one two three"),
    ("x y x y x", "y x y x y"),
    ("Designed APIs; mentored juniors.", "Designed REST APIs and mentored junior developers."),
]


@pytest.mark.parametrize("old, new", PAIRS)
def test_sides_are_reconstructed(old, new):
    tokens = word_diff(old, new)
    assert _side(tokens, {DiffKind.EQUAL, DiffKind.ADD}) == " ".join(new.split())
    assert _side(tokens, {DiffKind.EQUAL, DiffKind.REMOVE}) == " ".join(old.split())


@pytest.mark.parametrize("old, new", PAIRS)
def test_no_adjacent_tokens_share_a_kind(old, new):
    kinds = _kinds(word_diff(old, new))
    assert all(a != b for a, b in zip(kinds, kinds[1:]))


@pytest.mark.parametrize("old, new", PAIRS)
def test_equal_words_form_a_longest_common_subsequence(old, new):
    tokens = word_diff(old, new)
    old_words, new_words = old.split(), new.split()
    dp = [[0] * (len(new_words) + 1) for _ in range(len(old_words) + 1)]
    for i in range(1, len(old_words) + 1):
        for j in range(1, len(new_words) + 1):
            if old_words[i - 1] == new_words[j - 1]:
                dp[i][j] = dp[i - 1][j - 1] + 1
            else:
                dp[i][j] = max(dp[i - 1][j], dp[i][j - 1])
    equal_words = sum(len(t.text.split()) for t in tokens if t.kind == DiffKind.EQUAL)
    assert equal_words == dp[-1][-1]


# -------------------------------------------------------------
#  Oversized input fallback
# -------------------------------------------------------------
def test_oversized_input_falls_back_to_whole_text():
    old = " ".join(f"w{i}" for i in range(401))
    new = "short new text"
    assert word_diff(old, new) == [
        DiffToken(DiffKind.REMOVE, old),
        DiffToken(DiffKind.ADD, new),
    ]


def test_oversized_fallback_keeps_raw_text():
    new = "word  " * 401
    assert word_diff("", new) == [DiffToken(DiffKind.ADD, new)]


def test_oversized_fallback_omits_empty_side():
    old = " ".join(["same"] * 450)
    assert word_diff(old, "") == [DiffToken(DiffKind.REMOVE, old)]


def test_exactly_400_tokens_uses_lcs():
    old = " ".join(["same"] * 400)
    assert word_diff(old, old) == [DiffToken(DiffKind.EQUAL, old)]


def test_token_limit_can_be_overridden():
    tokens = word_diff("a b c", "a b d", max_tokens=2)
    assert tokens == [DiffToken(DiffKind.REMOVE, "a b c"), DiffToken(DiffKind.ADD, "a b d")]
