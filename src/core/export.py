"""CSV / Excel export utilities."""
import csv
from io import BytesIO

import openpyxl
from django.http import HttpResponse
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter


def _cell_value(item, field):
    if callable(field):
        return field(item)
    if isinstance(item, dict):
        return item.get(field, "")
    return getattr(item, field, "")


def rows_to_csv_response(rows, columns, filename):
    """Convert an iterable of objects or dicts to a CSV HttpResponse.

    Args:
        rows: iterable of objects or dicts
        columns: list of (field_name_or_callable, header_label) tuples.
            If field_name_or_callable is a string, the attribute (or dict key)
            is used. If it's callable, it's called with the row.
        filename: download filename (without extension)
    """
    response = HttpResponse(content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{filename}.csv"'
    # UTF-8 BOM for Excel compatibility
    response.write("\ufeff")

    writer = csv.writer(response)
    writer.writerow([col[1] for col in columns])

    for item in rows:
        row = []
        for field, _ in columns:
            val = _cell_value(item, field)
            row.append(str(val) if val is not None else "")
        writer.writerow(row)

    return response


def rows_to_xlsx_response(rows, columns, filename, sheet_title="Rapport"):
    """Same contract as :func:`rows_to_csv_response`, rendered as .xlsx."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = sheet_title[:31]

    headers = [col[1] for col in columns]
    header_font = Font(bold=True, color="FFFFFF", size=11)
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")

    for col_num, header in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col_num, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center", vertical="center")

    for row_num, item in enumerate(rows, start=2):
        for col_num, (field, _) in enumerate(columns, 1):
            ws.cell(row=row_num, column=col_num, value=_cell_value(item, field))

    for col_num in range(1, len(headers) + 1):
        col_letter = get_column_letter(col_num)
        max_length = len(str(headers[col_num - 1]))
        for row in ws.iter_rows(min_row=2, min_col=col_num, max_col=col_num):
            for cell in row:
                if cell.value is not None:
                    max_length = max(max_length, len(str(cell.value)))
        ws.column_dimensions[col_letter].width = min(max_length + 4, 50)

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)

    response = HttpResponse(
        buffer.getvalue(),
        content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
    response["Content-Disposition"] = f'attachment; filename="{filename}.xlsx"'
    return response
