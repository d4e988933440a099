import io

import pandas as pd


def xlsx_bytes(headers, rows):
    df = pd.DataFrame(rows, columns=headers)
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False)
    return output.getvalue()


def csv_bytes(headers, rows):
    lines = [",".join(headers)]
    for row in rows:
        lines.append(",".join("" if v is None else str(v) for v in row))
    return ("\n".join(lines) + "\n").encode("utf-8")


def add_scores(store, student, subject, scores, term="FIRST TERM", academic_year="2024/2025"):
    return store.insert("scores", [
        {
            "student_id": student["id"],
            "subject_id": subject["id"],
            "assessment_type": assessment_type,
            "score": value,
            "max_score": 100,
            "term": term,
            "academic_year": academic_year,
        }
        for assessment_type, value in scores.items()
    ])
