from sheet_analyst.lib.locale_detect import detect_locale, german_word_ratio
from sheet_analyst.lib.localization import MESSAGES, render


def test_every_locale_defines_the_same_keys() -> None:
    assert set(MESSAGES["de-DE"]) == set(MESSAGES["en-US"])


def test_render_formats_parameters() -> None:
    assert render("en-US", "average_answer", column="score", value="3.00") == "The average of score is 3.00."
    assert render("de-DE", "sum_answer", column="x", value="1.00") == "Die Summe von x ist 1.00."


def test_render_unknown_locale_uses_english() -> None:
    assert render("fr-FR", "error") == "There was an error processing your query."


def test_detect_locale_german_function_words() -> None:
    assert detect_locale("was ist der durchschnitt von score") == "de-DE"
    assert german_word_ratio("was ist der durchschnitt von score") == 0.5


def test_detect_locale_english_and_empty() -> None:
    assert detect_locale("what is the average of score") == "en-US"
    assert detect_locale("") == "en-US"
    assert detect_locale("   ") == "en-US"


def test_detect_locale_threshold_is_strict() -> None:
    # 1 of 10 words -> 0.1, not above 0.15
    text = "der one two three four five six seven eight nine"
    assert german_word_ratio(text) == 0.1
    assert detect_locale(text) == "en-US"
