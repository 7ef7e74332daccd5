from typing import Optional

EDIT_LEAF = "edit"
ADD_QUESTION_LEAF = "add-question"


def sibling_route(current_path: str, leaf: str, site_url: Optional[str] = None) -> str:
    """Swap the last segment of ``current_path`` for ``leaf``.

    ``/teacher/subjects/s1/quiz/q1/add-question`` with ``edit`` becomes
    ``/teacher/subjects/s1/quiz/q1/edit``.
    """
    segments = [segment for segment in current_path.strip().split("/") if segment]
    parent = "/".join(segments[:-1])
    route = f"/{parent}/{leaf}" if parent else f"/{leaf}"

    if site_url:
        return f"{site_url.rstrip('/')}{route}"
    return route
