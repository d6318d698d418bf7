import pytest

from pdfsalvage.quality import count_words, is_meaningful, word_tokens


def test_prose_is_meaningful():
    assert is_meaningful("The committee approved the budget for next year without changes.")


@pytest.mark.parametrize(
    "text",
    [
        "",
        "short",
        "   padded   ",
        "12 34 56 78 90 12 34 56",  # numeric only
        "a b c d e f g h i j k l",  # tokens too short
        "one two three four five",  # exactly five tokens
        "-- ** ## @@ !! ?? %% &&",
    ],
)
def test_sparse_or_symbolic_text_is_rejected(text):
    assert not is_meaningful(text)


def test_six_tokens_is_enough():
    assert is_meaningful("one two three four five six")


def test_tokens_are_letter_runs_of_three_or_more():
    assert word_tokens("ab abc x1yz2 héllo 42") == ["abc", "héllo"]


def test_count_words_splits_on_whitespace():
    assert count_words("  alpha\tbeta\n\ngamma ") == 3
    assert count_words("") == 0
