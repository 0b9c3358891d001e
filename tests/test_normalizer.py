from chatsearch.search.normalizer import (
    normalize_word,
    phone_normalize,
    phone_runs,
    split_into_words,
)


def test_normalize_word_lowercases_ascii_only() -> None:
    assert normalize_word("  PaVeL ") == "pavel"
    # Non-ASCII letters are left alone
    assert normalize_word("ÉCOLE") == "École"


def test_phone_normalize_keeps_letters_digits_and_plus() -> None:
    assert phone_normalize("+1 (323) 555-5555") == "+13235555555"
    assert phone_normalize("1.234.56") == "123456"
    assert phone_normalize("Bob") == "bob"
    assert phone_normalize("---") == ""


def test_split_into_words() -> None:
    assert split_into_words("Stinking  Lizaveta") == {"stinking", "lizaveta"}
    assert split_into_words("1 (415) 555-5555") == {"1", "415", "555", "5555"}
    assert split_into_words("a.b-c") == {"a", "b", "c"}
    assert split_into_words("+13235555555") == {"+13235555555"}


def test_split_into_words_collapses_duplicates() -> None:
    assert split_into_words("pavel Pavel PAVEL") == {"pavel"}


def test_split_into_words_blank_input() -> None:
    assert split_into_words("") == frozenset()
    assert split_into_words("   \t ") == frozenset()
    assert split_into_words("-.()") == frozenset()


def test_split_into_words_is_deterministic() -> None:
    text = "Book Club +12345678900 Bob Barker"
    assert split_into_words(text) == split_into_words(text)


def test_phone_runs() -> None:
    assert phone_runs("Lizaveta 1 (415) 555-5555") == {"14155555555"}
    assert phone_runs("Alice +12345678900 Bob +49030183000") == {
        "+12345678900",
        "+49030183000",
    }
    assert phone_runs("no digits here") == frozenset()
    assert phone_runs("") == frozenset()
