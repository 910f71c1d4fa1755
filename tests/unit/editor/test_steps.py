"""Unit tests for edit steps and position maps."""

import pytest

from notedown.editor.steps import (
    AddMarkStep,
    JoinBlocksStep,
    Mapping,
    RemoveMarkStep,
    ReplaceBlocksStep,
    ReplaceInlineStep,
    SetBlockTypeStep,
    SplitBlockStep,
    StepMap,
    describe_step,
)
from notedown.errors import NotedownSchemaError, NotedownUnresolvablePositionError
from notedown.schema import (
    HeadingAttrs,
    NodeKind,
    doc,
    hard_break,
    heading,
    link,
    paragraph,
    text,
)

URL = "https://x.org"


def _roundtrip(step, before):
    after = step.apply(before)
    assert step.invert(before).apply(after) == before
    return after


# =========================================================================
# Position maps
# =========================================================================

class TestStepMap:
    def test_insertion(self):
        step_map = StepMap(5, 0, 3)
        assert step_map.map(4) == 4
        assert step_map.map(5) == 8
        assert step_map.map(5, assoc=-1) == 5
        assert step_map.map(6) == 9

    def test_deletion(self):
        step_map = StepMap(5, 2, 0)
        assert step_map.map(5) == 5
        assert step_map.map(6) == 5
        assert step_map.map(7) == 5
        assert step_map.map(8) == 6

    def test_replacement_edges(self):
        step_map = StepMap(2, 1, 2)
        assert step_map.map(2) == 2
        assert step_map.map(3) == 4
        assert step_map.map(4) == 5

    def test_invert(self):
        assert StepMap(1, 2, 5).invert() == StepMap(1, 5, 2)

    def test_mapping_pipeline(self):
        mapping = Mapping()
        mapping.append(StepMap(0, 0, 2))
        mapping.append(StepMap(10, 0, 1))
        assert mapping.map(9) == 12
        assert len(mapping) == 2
        assert mapping.slice(1).map(9) == 9


# =========================================================================
# Inline replacement
# =========================================================================

class TestReplaceInline:
    def test_insert_text(self):
        before = doc(paragraph("Hello"))
        after = _roundtrip(ReplaceInlineStep(6, 6, (text(" world"),)), before)
        assert after == doc(paragraph("Hello world"))

    def test_delete_range(self):
        before = doc(paragraph("Hello"))
        after = _roundtrip(ReplaceInlineStep(2, 4), before)
        assert after == doc(paragraph("Hlo"))

    def test_insert_hard_break(self):
        before = doc(paragraph("ab"))
        after = _roundtrip(ReplaceInlineStep(2, 2, (hard_break(),)), before)
        assert after == doc(paragraph("a", hard_break(), "b"))

    def test_map(self):
        assert ReplaceInlineStep(3, 5, (text("xyz"),)).get_map() == StepMap(3, 2, 3)

    def test_cross_block_range_rejected(self):
        before = doc(paragraph("ab"), paragraph("cd"))
        with pytest.raises(NotedownUnresolvablePositionError):
            ReplaceInlineStep(2, 6).apply(before)

    def test_block_content_rejected(self):
        with pytest.raises(NotedownSchemaError):
            ReplaceInlineStep(1, 1, (paragraph("x"),))

    def test_out_of_range(self):
        with pytest.raises(NotedownUnresolvablePositionError) as exc_info:
            ReplaceInlineStep(40, 40, (text("x"),)).apply(doc(paragraph("ab")))
        assert exc_info.value.context["reason"] == "out_of_range"


# =========================================================================
# Split / join
# =========================================================================

class TestSplitJoin:
    def test_split(self):
        before = doc(paragraph("Hello"))
        after = _roundtrip(SplitBlockStep(3), before)
        assert after == doc(paragraph("He"), paragraph("llo"))

    def test_split_consuming_break(self):
        before = doc(paragraph("a", hard_break(), "b"))
        step = SplitBlockStep(2, consume_break=True)
        after = _roundtrip(step, before)
        assert after == doc(paragraph("a"), paragraph("b"))
        assert step.get_map() == StepMap(2, 1, 2)

    def test_split_without_break_rejected(self):
        with pytest.raises(NotedownUnresolvablePositionError):
            SplitBlockStep(2, consume_break=True).apply(doc(paragraph("ab")))

    def test_split_into_heading(self):
        before = doc(paragraph("a", hard_break(), "## b"))
        step = SplitBlockStep(2, NodeKind.HEADING, HeadingAttrs(2), consume_break=True)
        after = _roundtrip(step, before)
        assert after == doc(paragraph("a"), heading(2, "## b"))

    def test_join_keeps_first_markup(self):
        before = doc(heading(1, "# a"), paragraph("b"))
        after = _roundtrip(JoinBlocksStep(5), before)
        assert after == doc(heading(1, "# ab"))

    def test_join_with_break(self):
        before = doc(paragraph("a"), paragraph("b"))
        after = _roundtrip(JoinBlocksStep(3, insert_break=True), before)
        assert after == doc(paragraph("a", hard_break(), "b"))

    def test_join_at_document_edge_rejected(self):
        with pytest.raises(NotedownUnresolvablePositionError):
            JoinBlocksStep(0).apply(doc(paragraph("a")))

    def test_invert_without_following_block_rejected(self):
        with pytest.raises(NotedownUnresolvablePositionError):
            JoinBlocksStep(3).invert(doc(paragraph("a")))


# =========================================================================
# Whole blocks
# =========================================================================

class TestBlocks:
    def test_insert_blocks(self):
        before = doc(paragraph("a"))
        after = _roundtrip(ReplaceBlocksStep(3, 3, (paragraph("b"),)), before)
        assert after == doc(paragraph("a"), paragraph("b"))

    def test_remove_blocks(self):
        before = doc(paragraph("a"), paragraph("b"), paragraph("c"))
        after = _roundtrip(ReplaceBlocksStep(3, 6), before)
        assert after == doc(paragraph("a"), paragraph("c"))

    def test_inline_content_rejected(self):
        with pytest.raises(NotedownSchemaError):
            ReplaceBlocksStep(0, 0, (text("x"),))

    def test_set_block_type(self):
        before = doc(paragraph("# a"))
        after = _roundtrip(SetBlockTypeStep(0, NodeKind.HEADING, HeadingAttrs(1)), before)
        assert after == doc(heading(1, "# a"))

    def test_set_block_type_inside_block_rejected(self):
        with pytest.raises(NotedownUnresolvablePositionError):
            SetBlockTypeStep(1, NodeKind.HEADING).apply(doc(paragraph("a")))

    def test_invert_set_block_type_at_document_end_rejected(self):
        with pytest.raises(NotedownUnresolvablePositionError):
            SetBlockTypeStep(3, NodeKind.HEADING).invert(doc(paragraph("a")))


# =========================================================================
# Marks
# =========================================================================

class TestMarks:
    def test_add_and_remove(self):
        before = doc(paragraph(f"see {URL}"))
        after = _roundtrip(AddMarkStep(5, 18, link(URL)), before)
        assert after == doc(paragraph("see ", text(URL, [link(URL)])))
        removed = RemoveMarkStep(5, 18, link(URL)).apply(after)
        assert removed == before

    def test_mark_steps_do_not_move_positions(self):
        assert AddMarkStep(1, 3, link(URL)).get_map().map(2) == 2


def test_describe_step():
    description = describe_step(SplitBlockStep(4, NodeKind.HEADING, HeadingAttrs(2), True))
    assert description == {
        "step": "SplitBlockStep",
        "pos": 4,
        "kind": "heading",
        "attrs": {"level": 2},
        "consume_break": True,
    }
