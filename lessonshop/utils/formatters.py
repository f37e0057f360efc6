from lessonshop.config import settings

def money(v: float) -> str:
    return f"{v:.{settings.decimals}f} {settings.currency}"


def lesson_line(lesson) -> str:
    return f"#{lesson.id} {lesson.subject} — {lesson.location} | {money(float(lesson.price))} | мест: {lesson.spaces}"
