from collections import namedtuple


GradeBand = namedtuple("GradeBand", ["min_score", "grade", "remark"])

# highest band first; the first band whose floor the score reaches wins
GRADING_SCALE = (
    GradeBand(80, "1", "Excellent"),
    GradeBand(75, "2", "Very Good"),
    GradeBand(70, "3", "Good"),
    GradeBand(65, "4", "Credit"),
    GradeBand(60, "5", "Average"),
    GradeBand(50, "6", "Below Average"),
    GradeBand(45, "7", "Pass"),
    GradeBand(40, "8", "Developing"),
    GradeBand(0, "9", "Emerging"),
)


def grade_band(score):
    for band in GRADING_SCALE:
        if score >= band.min_score:
            return band
    return GRADING_SCALE[-1]


def grade_from_score(score):
    """Return ``(grade, remark)`` for a combined 0-100 score."""
    band = grade_band(score)
    return band.grade, band.remark


def score_range(band):
    """'75-79' style label used by the printed grading key."""
    index = GRADING_SCALE.index(band)
    if index == 0:
        return f"{band.min_score}-100"
    upper = GRADING_SCALE[index - 1].min_score - 1
    return f"{band.min_score}-{upper}"
