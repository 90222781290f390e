import time


def render_status(context, width):
    """
    context keys: status_msg, status_until, mode, file_name, shape, can_undo,
                  can_redo, analysis_pending, page_index, page_count
    """
    now = time.time()
    if context.get("status_msg") and now < context.get("status_until", 0):
        text = f" {context['status_msg']}"
    else:
        mode = context.get("mode", "GRID")
        fname = context.get("file_name") or ""
        rows, cols = context.get("shape", (0, 0))
        parts = [mode, fname, f"{rows}x{cols}"]

        history = []
        if context.get("can_undo"):
            history.append("u:undo")
        if context.get("can_redo"):
            history.append("^R:redo")
        if history:
            parts.append(" ".join(history))

        if context.get("page_count", 1) > 1:
            parts.append(f"Page {context.get('page_index', 0) + 1}/{context['page_count']}")

        if context.get("analysis_pending"):
            parts.append("AI: analysing…")

        text = " " + " | ".join(parts)

    return text.ljust(width)[:width]
