"""
Slide Manager
=============

Add, delete, duplicate and reorder slides. Every operation returns a new
slide list and the slide index to select; the input list is never modified,
so a rejected call leaves the document exactly as it was.
"""

from typing import List, Optional, Tuple

from ..errors import CapacityExceeded, InvalidSlideIndex, LastSlideRemoval
from ..models.canvas_models import Slide, MAX_SLIDES, clone_slide, create_default_slide


def check_index(slides: List[Slide], index: int) -> None:
    if not 0 <= index < len(slides):
        raise InvalidSlideIndex(index, len(slides))


def can_add_slide(slides: List[Slide]) -> bool:
    return len(slides) < MAX_SLIDES


def add_slide(slides: List[Slide], slide: Optional[Slide] = None) -> Tuple[List[Slide], int]:
    """
    Append a slide (an empty default slide unless one is given).

    Returns:
        (new_slides, index_of_new_slide)

    Raises:
        CapacityExceeded: if the carousel already holds MAX_SLIDES slides
    """
    if not can_add_slide(slides):
        raise CapacityExceeded(MAX_SLIDES)
    new_slides = list(slides) + [slide or create_default_slide()]
    return new_slides, len(new_slides) - 1


def delete_slide(
    slides: List[Slide],
    index: int,
    current_index: int = 0
) -> Tuple[List[Slide], int]:
    """
    Remove the slide at index.

    Returns:
        (new_slides, selected_index) where the selection is clamped to the
        remaining slides

    Raises:
        InvalidSlideIndex: index out of range
        LastSlideRemoval: the document would become empty
    """
    check_index(slides, index)
    if len(slides) <= 1:
        raise LastSlideRemoval()

    new_slides = slides[:index] + slides[index + 1:]
    if current_index > index:
        current_index -= 1
    return new_slides, max(0, min(current_index, len(new_slides) - 1))


def duplicate_slide(slides: List[Slide], index: int) -> Tuple[List[Slide], int]:
    """
    Deep-copy the slide at index (new slide and element ids) and insert it
    right after the original.

    Returns:
        (new_slides, index_of_copy)
    """
    check_index(slides, index)
    if not can_add_slide(slides):
        raise CapacityExceeded(MAX_SLIDES)

    copy = clone_slide(slides[index])
    new_slides = slides[:index + 1] + [copy] + slides[index + 1:]
    return new_slides, index + 1


def reorder_slides(slides: List[Slide], from_index: int, to_index: int) -> Tuple[List[Slide], int]:
    """
    Move the slide at from_index to to_index, shifting the slides between.

    Returns:
        (new_slides, to_index)
    """
    check_index(slides, from_index)
    check_index(slides, to_index)
    if from_index == to_index:
        return list(slides), to_index

    new_slides = list(slides)
    moved = new_slides.pop(from_index)
    new_slides.insert(to_index, moved)
    return new_slides, to_index
