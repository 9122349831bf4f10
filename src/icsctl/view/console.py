"""
console.py
----------
Plain-text rendering of connection status for the terminal.
"""

from typing import Callable, Iterable

from icsctl.model.sharing_model import ConnectionStatus

COLUMNS = ("Name", "Sharing", "Role", "Status", "Type", "IPv4")


def _row(status: ConnectionStatus) -> tuple[str, ...]:
    return (
        status.name,
        "Enabled" if status.enabled else "Disabled",
        status.role.label if status.role else "—",
        status.status.value,
        status.media_type or "—",
        ", ".join(status.addresses) or "—",
    )


def format_status_table(statuses: Iterable[ConnectionStatus]) -> str:
    """Render statuses as a left-aligned table with a header rule."""
    rows = [_row(s) for s in statuses]
    if not rows:
        return "No connections to report."

    widths = [max(len(COLUMNS[i]), *(len(r[i]) for r in rows)) for i in range(len(COLUMNS))]
    lines = [
        "  ".join(col.ljust(w) for col, w in zip(COLUMNS, widths)).rstrip(),
        "  ".join("-" * w for w in widths),
    ]
    for row in rows:
        lines.append("  ".join(cell.ljust(w) for cell, w in zip(row, widths)).rstrip())
    return "\n".join(lines)


def confirm_action(question: str, ask: Callable[[str], str] = input) -> bool:
    """Ask a yes/no question; anything but y/yes counts as no."""
    try:
        answer = ask(f"{question} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")
