"""
Document Export Service - rendering della tabella di export comporto

Riceve la struttura prodotta da services.reporting.build_export_table
({headers, rows, stats, title, date}) e produce i byte del documento:
- Excel (.xlsx) con openpyxl
- PDF con reportlab
- CSV (separatore ';') con defusedcsv
"""

from io import BytesIO, StringIO
from typing import Any, Dict, List, Tuple

from defusedcsv import csv
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

STATS_LABELS = [
    ('total', 'Totale Dipendenti'),
    ('expiring_soon', 'In Scadenza (10gg)'),
    ('expired', 'Comporto Scaduto'),
    ('compliant', 'In Regola'),
]

# Colori di riga per etichetta di stato
STATUS_FILLS = {
    'Scaduto': 'F8D7DA',
    'Attenzione': 'FFF3CD',
    'Conforme': 'D4EDDA',
}

HEADER_COLOR = '366092'
STATUS_COLUMN = 7


def stats_lines(table: Dict[str, Any]) -> List[Tuple[str, int]]:
    """Coppie (etichetta, valore) del riepilogo statistiche"""
    stats = table.get('stats') or {}
    return [(label, stats.get(key, 0)) for key, label in STATS_LABELS]


def render_excel(table: Dict[str, Any]) -> bytes:
    """Genera il file Excel del report comporto"""
    wb = Workbook()
    ws = wb.active
    ws.title = "Comporto"

    # Header styling
    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color=HEADER_COLOR, end_color=HEADER_COLOR, fill_type="solid")
    thin_border = Border(
        left=Side(style='thin'), right=Side(style='thin'),
        top=Side(style='thin'), bottom=Side(style='thin')
    )

    # Titolo e data
    ws.cell(row=1, column=1, value=table['title']).font = Font(bold=True, size=14)
    ws.cell(row=2, column=1, value=f"Data: {table['date']}")

    header_row = 4
    for col, header in enumerate(table['headers'], 1):
        cell = ws.cell(row=header_row, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal='center')
        cell.border = thin_border

    # Dati
    for row_idx, row_data in enumerate(table['rows'], header_row + 1):
        status_color = STATUS_FILLS.get(row_data[STATUS_COLUMN])
        for col, value in enumerate(row_data, 1):
            cell = ws.cell(row=row_idx, column=col, value=value)
            cell.border = thin_border
            if col == STATUS_COLUMN + 1 and status_color:
                cell.fill = PatternFill(start_color=status_color, end_color=status_color, fill_type="solid")
                cell.alignment = Alignment(horizontal='center')

    # Riepilogo statistiche sotto la tabella
    summary_row = header_row + len(table['rows']) + 2
    for offset, (label, value) in enumerate(stats_lines(table)):
        ws.cell(row=summary_row + offset, column=1, value=label).font = Font(bold=True)
        ws.cell(row=summary_row + offset, column=2, value=value)

    # Auto-adjust column widths
    for column in ws.columns:
        max_length = 0
        column_letter = column[0].column_letter
        for cell in column:
            if cell.value is not None and cell.row >= header_row:
                max_length = max(max_length, len(str(cell.value)))
        ws.column_dimensions[column_letter].width = min(max_length + 2, 50)

    output = BytesIO()
    wb.save(output)
    return output.getvalue()


def render_pdf(table: Dict[str, Any]) -> bytes:
    """Genera il PDF del report comporto (A4 orizzontale)"""
    output = BytesIO()
    doc = SimpleDocTemplate(output, pagesize=landscape(A4),
                            leftMargin=1.5 * cm, rightMargin=1.5 * cm,
                            topMargin=1.5 * cm, bottomMargin=1.5 * cm,
                            title=table['title'])
    styles = getSampleStyleSheet()

    story = [
        Paragraph(table['title'], styles['Title']),
        Paragraph(f"Data: {table['date']}", styles['Normal']),
        Spacer(1, 0.4 * cm),
    ]

    summary = ' &nbsp;|&nbsp; '.join(f"{label}: <b>{value}</b>" for label, value in stats_lines(table))
    story.append(Paragraph(summary, styles['Normal']))
    story.append(Spacer(1, 0.4 * cm))

    data = [table['headers']] + [[str(value) for value in row] for row in table['rows']]
    pdf_table = Table(data, repeatRows=1)
    table_style = [
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor(f'#{HEADER_COLOR}')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ]
    for row_idx, row in enumerate(table['rows'], 1):
        status_color = STATUS_FILLS.get(row[STATUS_COLUMN])
        if status_color:
            table_style.append(('BACKGROUND', (STATUS_COLUMN, row_idx), (STATUS_COLUMN, row_idx),
                                colors.HexColor(f'#{status_color}')))
    pdf_table.setStyle(TableStyle(table_style))
    story.append(pdf_table)

    doc.build(story)
    return output.getvalue()


def render_csv(table: Dict[str, Any]) -> bytes:
    """Genera il CSV del report (separatore ';' per Excel in italiano)"""
    output = StringIO()
    writer = csv.writer(output, delimiter=';')
    writer.writerow(table['headers'])
    for row in table['rows']:
        writer.writerow(row)
    # BOM per la corretta apertura in Excel
    return ('\ufeff' + output.getvalue()).encode('utf-8')
