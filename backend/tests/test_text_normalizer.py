from app.services.text_normalizer import (
    deduplicate_labels,
    normalize_for_query,
    should_fetch_suggestions,
    suggestion_key,
)


def test_normalize_for_query_strips_accents_and_punctuation() -> None:
    assert normalize_for_query("São Paulo!!") == "Sao Paulo"
    assert normalize_for_query("  Zürich,   (CH)  ") == "Zurich CH"
    assert normalize_for_query("Saint-Étienne") == "Saint-Etienne"


def test_normalize_for_query_keeps_non_latin_letters_and_digits() -> None:
    assert normalize_for_query("東京 23区") == "東京 23区"
    assert normalize_for_query("Москва.") == "Москва"


def test_normalize_for_query_handles_empty_input() -> None:
    assert normalize_for_query(None) == ""
    assert normalize_for_query("") == ""
    assert normalize_for_query("?!.,") == ""


def test_should_fetch_suggestions_requires_three_characters() -> None:
    assert not should_fetch_suggestions("ab")
    assert not should_fetch_suggestions("  ab  ")
    assert not should_fetch_suggestions("a!!!")
    assert not should_fetch_suggestions(None)
    assert should_fetch_suggestions("Rio")
    assert should_fetch_suggestions("Ürü")


def test_suggestion_key_ignores_case_accents_and_punctuation() -> None:
    assert suggestion_key("São Paulo, Brazil") == suggestion_key("sao paulo  brazil.")
    assert suggestion_key("Saint-Denis") == "saint-denis"


def test_deduplicate_labels_keeps_first_surface_form() -> None:
    labels = ["São Paulo, Brazil", "Sao paulo, Brazil", "Rio"]
    assert deduplicate_labels(labels) == ["São Paulo, Brazil", "Rio"]


def test_deduplicate_labels_handles_empty_sequence() -> None:
    assert deduplicate_labels([]) == []


def test_deduplicate_labels_is_idempotent_ordered_subsequence() -> None:
    labels = ["Köln, Germany", "Koln, Germany", "Bonn", "KÖLN germany", "bonn!", "Aachen"]
    once = deduplicate_labels(labels)

    assert once == ["Köln, Germany", "Bonn", "Aachen"]
    assert deduplicate_labels(once) == once
    positions = [labels.index(label) for label in once]
    assert positions == sorted(positions)
