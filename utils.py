# utils.py

from typing import Dict, List, Optional

FREE_COLOR = "lightgray"


def get_color(job_id: Optional[int]):
    """Return a color for a frame: gray when free, a pastel hue per job."""
    if job_id is None:
        return FREE_COLOR
    # golden-angle spacing keeps neighbouring job ids apart
    return f"hsl({(job_id * 137) % 360}, 70%, 75%)"


def frame_label(frame: Dict[str, object]) -> str:
    if not frame["busy"]:
        return f"F{frame['frame']}: Free"
    return f"F{frame['frame']}: J{frame['job']} P{frame['page']}"


def trace_rows(trace) -> List[Dict[str, object]]:
    rows = []
    for ev in trace:
        rows.append({
            "access": ev.access_index,
            "job": ev.job_id,
            "page": ev.page_no,
            "outcome": ev.outcome,
            "frame": ev.frame_no,
            "evicted": f"J{ev.evicted[0]} P{ev.evicted[1]}" if ev.evicted else "",
        })
    return rows
