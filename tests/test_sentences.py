import datetime as dt

from vtt_translate.sentences import reconstruct_sentences
from vtt_translate.types import ChunkRef, Cue
from vtt_translate.vtt import parse_vtt


def _cue(second: int, *lines: str) -> Cue:
    return Cue(start=dt.timedelta(seconds=second), end=dt.timedelta(seconds=second + 1), text_lines=list(lines))


def _normalise(text: str) -> str:
    return "".join(text.split())


def test_sentence_spanning_two_cues() -> None:
    spans = reconstruct_sentences([_cue(1, "Hello"), _cue(2, "world.")])

    assert len(spans) == 1
    assert spans[0].text == "Hello world."
    assert spans[0].chunks == [ChunkRef(0, 0, 0, 5), ChunkRef(1, 0, 0, 6)]
    assert spans[0].cue_range == range(0, 2)
    assert spans[0].weights == [5, 6]


def test_split_inside_a_line_records_offsets(sample_vtt_text: str) -> None:
    spans = reconstruct_sentences(parse_vtt(sample_vtt_text))

    assert [span.text for span in spans] == ["Hello world.", "How are you today?", "I am fine"]
    assert spans[1].chunks[0] == ChunkRef(cue_index=1, line_index=0, start=7, length=7)
    assert spans[2].chunks == [ChunkRef(cue_index=2, line_index=1, start=0, length=9)]


def test_question_exclamation_ellipsis_and_closing_quotes() -> None:
    spans = reconstruct_sentences([_cue(1, 'Really? Yes! He said "wait..." then left')])

    assert [span.text for span in spans] == ["Really?", "Yes!", 'He said "wait..."', "then left"]


def test_decimal_points_do_not_end_sentences() -> None:
    spans = reconstruct_sentences([_cue(1, "It costs 3.50 dollars.")])

    assert [span.text for span in spans] == ["It costs 3.50 dollars."]


def test_blank_lines_and_empty_cues_contribute_nothing() -> None:
    spans = reconstruct_sentences([_cue(1, "", "  "), _cue(2, "Done.")])

    assert len(spans) == 1
    assert spans[0].chunks == [ChunkRef(1, 0, 0, 5)]


def test_no_cues_gives_no_sentences() -> None:
    assert reconstruct_sentences([]) == []


def test_sentence_text_covers_all_cue_text(sample_vtt_text: str) -> None:
    cues = parse_vtt(sample_vtt_text)

    spans = reconstruct_sentences(cues)

    source = "".join(line for cue in cues for line in cue.text_lines)
    assert _normalise("".join(span.text for span in spans)) == _normalise(source)


def test_chunks_are_in_non_decreasing_cue_order(sample_vtt_text: str) -> None:
    spans = reconstruct_sentences(parse_vtt(sample_vtt_text))

    positions = [(chunk.cue_index, chunk.line_index, chunk.start) for span in spans for chunk in span.chunks]
    assert positions == sorted(positions)
