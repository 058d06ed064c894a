"""
Tests for slide add/delete/duplicate/reorder.
"""

import pytest

from carousel_studio.canvas import slide_manager
from carousel_studio.errors import CapacityExceeded, InvalidSlideIndex, LastSlideRemoval
from carousel_studio.models.canvas_models import MAX_SLIDES, Slide, slide_content


def _slides(n):
    return [Slide(id=f"slide-{i}") for i in range(n)]


def test_add_appends_and_selects_new_slide():
    slides = _slides(2)
    new_slides, index = slide_manager.add_slide(slides)

    assert len(new_slides) == 3
    assert index == 2
    assert len(slides) == 2


def test_add_rejected_at_capacity():
    slides = _slides(MAX_SLIDES)
    assert not slide_manager.can_add_slide(slides)
    with pytest.raises(CapacityExceeded):
        slide_manager.add_slide(slides)
    assert len(slides) == MAX_SLIDES


def test_delete_last_remaining_slide_rejected():
    with pytest.raises(LastSlideRemoval):
        slide_manager.delete_slide(_slides(1), 0)


def test_delete_out_of_range_rejected():
    with pytest.raises(InvalidSlideIndex):
        slide_manager.delete_slide(_slides(3), 3)
    with pytest.raises(InvalidSlideIndex):
        slide_manager.delete_slide(_slides(3), -1)


@pytest.mark.parametrize("deleted,current,expected", [
    (2, 2, 1),
    (0, 2, 1),
    (1, 0, 0),
    (1, 1, 1),
])
def test_delete_clamps_selection(deleted, current, expected):
    new_slides, selected = slide_manager.delete_slide(_slides(3), deleted, current)
    assert len(new_slides) == 2
    assert selected == expected


def test_duplicate_inserts_deep_copy_after_original(sample_slides):
    new_slides, index = slide_manager.duplicate_slide(sample_slides, 0)

    assert index == 1
    assert len(new_slides) == 4
    copy = new_slides[1]
    assert copy.id != sample_slides[0].id
    assert {e.id for e in copy.elements}.isdisjoint({e.id for e in sample_slides[0].elements})
    assert slide_content(copy) == slide_content(sample_slides[0])
    assert new_slides[2] is sample_slides[1]


def test_duplicate_then_delete_restores_content(sample_slides):
    before = [slide_content(s) for s in sample_slides]
    duplicated, index = slide_manager.duplicate_slide(sample_slides, 1)
    restored, _ = slide_manager.delete_slide(duplicated, index)
    assert [slide_content(s) for s in restored] == before


def test_duplicate_rejected_at_capacity():
    with pytest.raises(CapacityExceeded):
        slide_manager.duplicate_slide(_slides(MAX_SLIDES), 0)


def test_reorder_moves_slide():
    new_slides, index = slide_manager.reorder_slides(_slides(4), 0, 2)
    assert [s.id for s in new_slides] == ["slide-1", "slide-2", "slide-0", "slide-3"]
    assert index == 2


def test_reorder_moves_slide_backwards():
    new_slides, index = slide_manager.reorder_slides(_slides(3), 2, 0)
    assert [s.id for s in new_slides] == ["slide-2", "slide-0", "slide-1"]
    assert index == 0


def test_reorder_same_index_is_noop():
    slides = _slides(3)
    new_slides, index = slide_manager.reorder_slides(slides, 1, 1)
    assert [s.id for s in new_slides] == [s.id for s in slides]
    assert index == 1


def test_reorder_rejects_bad_index():
    slides = _slides(3)
    with pytest.raises(InvalidSlideIndex):
        slide_manager.reorder_slides(slides, 0, 5)
    assert [s.id for s in slides] == ["slide-0", "slide-1", "slide-2"]
