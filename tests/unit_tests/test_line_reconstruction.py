from pdfsalvage.models import TextRun
from pdfsalvage.reconstruct import concat_runs, raw_page_text, reconstruct_lines


def test_orders_top_to_bottom_then_left_to_right():
    runs = [
        TextRun("world", (120.0, 700.0)),
        TextRun("second", (72.0, 680.0)),
        TextRun("Hello", (72.0, 700.0)),
        TextRun("line", (130.0, 680.0)),
    ]
    assert reconstruct_lines(runs) == "Hello world\nsecond line"


def test_small_vertical_jitter_stays_on_one_line():
    runs = [
        TextRun("a", (10.0, 500.0)),
        TextRun("b", (20.0, 497.0)),  # within 5 units
        TextRun("c", (30.0, 490.0)),  # 7 below b -> new line
    ]
    assert reconstruct_lines(runs) == "a b\nc"


def test_threshold_is_strict():
    runs = [TextRun("up", (0.0, 105.0)), TextRun("down", (0.0, 100.0))]
    # exactly 5 units apart is not a break
    assert reconstruct_lines(runs) == "up down"


def test_empty_runs_are_skipped():
    runs = [
        TextRun("   ", (0.0, 300.0)),
        TextRun("kept", (0.0, 200.0)),
        TextRun("", (0.0, 100.0)),
    ]
    assert reconstruct_lines(runs) == "kept"


def test_no_runs_gives_empty_text():
    assert reconstruct_lines([]) == ""


def test_malformed_positions_fall_back_to_encounter_order():
    runs = [
        TextRun("first", (0.0, 10.0)),
        TextRun("second", ("bad", None)),  # type: ignore[arg-type]
        TextRun("third", (0.0, 30.0)),
    ]
    assert reconstruct_lines(runs) == "first second third"


def test_reconstruction_is_idempotent_on_its_own_output():
    runs = [
        TextRun("alpha", (0.0, 90.0)),
        TextRun("beta", (40.0, 90.0)),
        TextRun("gamma", (0.0, 60.0)),
    ]
    once = reconstruct_lines(runs)
    again = reconstruct_lines([TextRun(once, (0.0, 0.0))])
    assert again == once


def test_concat_runs_keeps_encounter_order():
    runs = [TextRun(" b ", (0.0, 0.0)), TextRun("", (0.0, 0.0)), TextRun("a", (0.0, 99.0))]
    assert concat_runs(runs) == "b a"


def test_raw_page_text_is_unprocessed():
    runs = [TextRun("<<", (0.0, 0.0)), TextRun("/Length 5", (0.0, 0.0))]
    assert raw_page_text(runs) == "<< /Length 5"
