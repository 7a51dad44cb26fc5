"""
Slot overlap rules.

Slots are half-open intervals [start, end): a slot ending at 10:00 does not
clash with one starting at 10:00. Functions take any objects exposing
``day_of_week``, ``start_time`` and ``end_time``.
"""


def slots_overlap(a_start, a_end, b_start, b_end):
    return a_start < b_end and b_start < a_end


def find_overlaps(candidate, existing):
    """Slots in ``existing`` that clash with ``candidate`` on the same day"""
    return [
        slot for slot in existing
        if slot.day_of_week == candidate.day_of_week
        and slots_overlap(candidate.start_time, candidate.end_time, slot.start_time, slot.end_time)
    ]


def find_conflicting_pairs(slots):
    """Every overlapping pair within ``slots``, in input order"""
    conflicts = []
    for index, first in enumerate(slots):
        for second in slots[index + 1:]:
            if (first.day_of_week == second.day_of_week and
                    slots_overlap(first.start_time, first.end_time, second.start_time, second.end_time)):
                conflicts.append((first, second))
    return conflicts
