"""Snapshot comparison with rename and move detection."""

import os
from typing import Dict, List, Tuple

from .models import Event, FileInfo, Op, Snapshot


def _pair_moves(
    removes: Dict[str, FileInfo],
    creates: Dict[str, FileInfo],
) -> List[Event]:
    """
    Match removed entries against created ones that look like the same file.

    Matched entries are deleted from both candidate maps. Each removal takes
    the first unconsumed creation (in creation order) whose metadata matches.
    Quadratic in the number of candidates.
    """
    events = []
    matched: List[Tuple[str, str]] = []

    for old_path, old_info in removes.items():
        for new_path, new_info in creates.items():
            if not old_info.same_file(new_info):
                continue
            if os.path.dirname(old_path) == os.path.dirname(new_path):
                op = Op.RENAME
            else:
                op = Op.MOVE
            events.append(Event(
                op=op,
                path=f"{old_path} -> {new_path}",
                info=old_info,
                old_path=old_path,
                dest_path=new_path,
            ))
            matched.append((old_path, new_path))
            del creates[new_path]
            break

    for old_path, _ in matched:
        del removes[old_path]

    return events


def diff(old: Snapshot, new: Snapshot) -> List[Event]:
    """
    Compute the events that turn one snapshot into the next.

    Order of the result:
    1. WRITE and CHMOD for paths present in both snapshots, in ``new`` order
       (WRITE first when a path has both)
    2. RENAME and MOVE, in ``old`` order
    3. Unmatched CREATE, in ``new`` order
    4. Unmatched REMOVE, in ``old`` order

    Args:
        old: Previously committed snapshot
        new: Freshly gathered snapshot

    Returns:
        Ordered list of events; empty when nothing changed
    """
    events = []
    removes = {path: info for path, info in old.items() if path not in new}
    creates = {}

    for path, info in new.items():
        old_info = old.get(path)
        if old_info is None:
            creates[path] = info
            continue
        if old_info.mtime_ns != info.mtime_ns:
            events.append(Event(Op.WRITE, path, info))
        if old_info.mode != info.mode:
            events.append(Event(Op.CHMOD, path, info))

    events.extend(_pair_moves(removes, creates))
    events.extend(Event(Op.CREATE, path, info) for path, info in creates.items())
    events.extend(Event(Op.REMOVE, path, info) for path, info in removes.items())
    return events
