import io

import pandas as pd

from sheet_analyst.lib.workbook_io import decode_workbook, frame_to_rows, guess_ext


def test_guess_ext_prefers_filename() -> None:
    assert guess_ext("Report.XLSX", "text/csv") == "xlsx"
    assert guess_ext(None, "text/csv") == "csv"
    assert guess_ext("", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet") == "xlsx"
    assert guess_ext(None, None) == ""


def test_frame_to_rows_drops_blank_headers_and_rows() -> None:
    df = pd.DataFrame({"a": [1.5, None], "Unnamed: 1": [None, None], "b": ["x", None]})
    assert frame_to_rows(df) == [{"a": 1.5, "b": "x"}]


def test_decode_csv_keeps_python_scalars() -> None:
    dataset = decode_workbook(b"name,score\nA,1\nB,\nC,3\n", filename="scores.csv")
    assert list(dataset.sheets) == ["Sheet1"]
    rows = dataset.active_rows()
    assert rows[0] == {"name": "A", "score": 1.0}
    assert rows[1]["score"] is None
    assert type(rows[2]["score"]) is float


def test_decode_xlsx_reads_every_sheet() -> None:
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        pd.DataFrame({"score": [1, 2]}).to_excel(writer, sheet_name="Grades", index=False)
        pd.DataFrame({"city": ["Berlin"]}).to_excel(writer, sheet_name="Cities", index=False)
    dataset = decode_workbook(buf.getvalue(), filename="book.xlsx")
    assert list(dataset.sheets) == ["Grades", "Cities"]
    assert dataset.active_sheet == "Grades"
    assert dataset.columns() == ["score"]
    assert dataset.sheets["Cities"] == [{"city": "Berlin"}]


def test_decode_respects_max_rows() -> None:
    dataset = decode_workbook(b"n\n1\n2\n3\n4\n", filename="n.csv", max_rows=2)
    assert len(dataset.active_rows()) == 2
