import pytest

from websearch.aggregator import aggregate, trim_fragment
from websearch.contracts import RawHit
from websearch.text_utils import substitute_params, trim_to_end_sentence, unique

pytestmark = pytest.mark.unit


def test_duplicate_bits_appear_once():
    hit = RawHit(text_bits=["Pope Francis leads.", "Pope Francis leads.", "Second fact."])
    result = aggregate(hit, budget=1500)
    assert result.text == "Pope Francis leads.\nSecond fact.\n"


def test_trailing_ellipsis_cuts_to_last_sentence():
    assert trim_fragment("First sentence. Second part...") == "First sentence."
    assert trim_fragment("First sentence. Second part…") == "First sentence."


def test_leading_ellipsis_drops_partial_sentence():
    assert trim_fragment("...end of previous. Next sentence here.") == "Next sentence here."


def test_bit_without_markers_is_unchanged():
    assert trim_fragment("Plain text without marks") == "Plain text without marks"


def test_budget_keeps_the_crossing_bit_and_stops():
    hit = RawHit(text_bits=["aaaa", "bbbb", "cccc"])
    result = aggregate(hit, budget=6)
    assert result.text == "aaaa\nbbbb\n"


def test_first_bit_over_budget_is_kept_whole():
    hit = RawHit(text_bits=["x" * 50, "second"])
    result = aggregate(hit, budget=10)
    assert result.text == "x" * 50 + "\n"


def test_under_budget_keeps_every_bit():
    bits = [f"Fact number {i}." for i in range(5)]
    result = aggregate(RawHit(text_bits=bits), budget=1500)
    assert result.text == "".join(bit + "\n" for bit in bits)


def test_links_and_images_are_deduplicated_in_order():
    links = [f"https://site{i % 12}.example/page" for i in range(15)]
    hit = RawHit(
        text_bits=["Some text."],
        links=links + ["", links[0]],
        images=["https://img.example/a.png", "https://img.example/a.png"],
    )
    result = aggregate(hit, budget=1500)
    assert result.links == [f"https://site{i}.example/page" for i in range(12)]
    assert result.images == ["https://img.example/a.png"]


def test_empty_hit_is_empty_result():
    result = aggregate(RawHit(links=["https://a.example"]), budget=1500)
    assert result.empty
    assert result.text == ""
    assert result.links == []


def test_bits_trimming_to_nothing_are_skipped():
    hit = RawHit(text_bits=["", "...", "Kept."])
    result = aggregate(hit, budget=1500)
    assert result.text == "Kept.\n"


def test_aggregate_is_deterministic():
    hit = RawHit(text_bits=["One.", "Two...", "One."], links=["https://a.example"])
    assert aggregate(hit, budget=100) == aggregate(hit, budget=100)


def test_unique_keeps_first_occurrence():
    assert unique(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


def test_trim_to_end_sentence_drops_mark_after_space():
    assert trim_to_end_sentence('He said hello. "') == "He said hello."


def test_substitute_params_is_case_insensitive_and_keeps_unknown():
    text = substitute_params("{{Query}}: {{text}} {{user}}", {"query": "q", "text": "t"})
    assert text == "q: t {{user}}"
