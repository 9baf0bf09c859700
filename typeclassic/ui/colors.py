"""Theme colors and color utilities for the UI."""


class PracticeColors:
    """Light theme palette."""

    BG = "#f6f1e7"
    CARD_BG = "#fffdf8"
    CARD_BORDER = "#e2d6bf"

    CORRECT = "#15803d"
    INCORRECT = "#b91c1c"
    INCORRECT_BG = "#fee2e2"
    CURRENT_BG = "#fde68a"
    PENDING = "#78716c"

    TEXT_PRIMARY = "#292524"


STATUS_STYLES = {
    "correct": f"color:{PracticeColors.CORRECT};",
    "incorrect": f"color:{PracticeColors.INCORRECT}; background:{PracticeColors.INCORRECT_BG};",
    "current": f"color:{PracticeColors.TEXT_PRIMARY}; background:{PracticeColors.CURRENT_BG}; text-decoration:underline;",
    "pending": f"color:{PracticeColors.PENDING};",
}


def _rgb(color: str) -> tuple:
    return tuple(int(color[i : i + 2], 16) for i in (1, 3, 5))


def blend_hex(a: str, b: str, t: float) -> str:
    """Mix two #RRGGBB colors: t=0 gives a, t=1 gives b. Malformed input returns a."""
    a, b = a.strip(), b.strip()
    if not all(c.startswith("#") and len(c) == 7 for c in (a, b)):
        return a
    try:
        start, end = _rgb(a), _rgb(b)
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    mixed = (int(s + (e - s) * t) for s, e in zip(start, end))
    return "#" + "".join(f"{channel:02X}" for channel in mixed)


def accuracy_color(accuracy: float) -> str:
    """Red at 80% accuracy or below, green at 100%."""
    return blend_hex(PracticeColors.INCORRECT, PracticeColors.CORRECT, (accuracy - 80.0) / 20.0)
