# ============================================================================
# Records Export: spreadsheet and PDF report
# ============================================================================

import logging
from datetime import date, datetime
from io import BytesIO
from typing import Any, Dict, Iterable, List, Optional
from xml.sax.saxutils import escape

import pandas as pd

from compliance_tracker.core.normalizer import UnifiedRecord
from compliance_tracker.core.records import Procedure
from compliance_tracker.core.remaining import remaining

logger = logging.getLogger(__name__)

# --- "Midnight & Gold" Palette ---
REPORT_PALETTE = {
    "cover_bg": "#0F172A",
    "gold_accent": "#C5A059",
    "brand_primary": "#1E293B",
    "text_main": "#334155",
    "table_header": "#1E293B",
    "table_row_even": "#F8FAFC",
    "table_border": "#E2E8F0",
}

STATUS_TEXT = {
    "active": "Active",
    "soon_to_expire": "Soon to Expire",
    "expired": "Expired",
}

RECORD_COLUMNS = [
    "#", "Record Type", "Name", "Number", "Expiry Date",
    "Status", "Remaining Days", "Remaining", "Cost",
]

PROCEDURE_COLUMNS = {
    "license_name": "Service Name",
    "authority": "Authority",
    "contact_numbers": "Contact Numbers",
    "email": "Email",
    "employee_name": "Employee Name",
    "employee_number": "Employee Number",
    "requirements": "Requirements",
    "website_name": "Website Name",
    "website_url": "Website URL",
    "username": "Username",
    "notes": "Notes",
}


def format_cost(amount: Optional[float], currency: str = "AED") -> str:
    """Format a cost amount for display."""
    return f"{(amount or 0):,.2f} {currency}".strip()


def build_record_rows(
    records: Iterable[UnifiedRecord],
    reference_date: Optional[date] = None,
    locale: str = "en",
    currency: str = "AED"
) -> List[Dict[str, Any]]:
    """
    Build export rows from already sorted and filtered unified records.

    Status, remaining days and cost are the values the engine derived, so
    exported numbers match what the tables show.

    Args:
        records: Unified records in display order
        reference_date: Day remaining periods are measured from (default: today)
        locale: Label language for the remaining column
        currency: Currency suffix for costs

    Returns:
        List of row dictionaries keyed by column header
    """
    rows = []
    for index, record in enumerate(records, start=1):
        period = remaining(record.expiry_date, reference_date, locale)
        rows.append({
            "#": index,
            "Record Type": record.category_label,
            "Name": record.name,
            "Number": record.number,
            "Expiry Date": record.expiry_date or "",
            "Status": STATUS_TEXT[record.status.value],
            "Remaining Days": period.days if period.days is not None else "",
            "Remaining": period.label,
            "Cost": format_cost(record.display_cost, currency),
        })
    return rows


def build_procedure_rows(procedures: Iterable[Procedure]) -> List[Dict[str, Any]]:
    """Export rows for procedures; passwords are never exported."""
    return [
        {header: getattr(procedure, field) or "" for field, header in PROCEDURE_COLUMNS.items()}
        for procedure in procedures
    ]


def write_xlsx(
    rows: List[Dict[str, Any]],
    sheet_name: str = "Records",
    columns: Optional[List[str]] = None
) -> bytes:
    """
    Write rows to an Excel workbook.

    Args:
        rows: Row dictionaries
        sheet_name: Worksheet title
        columns: Column order; defaults to the keys of the first row

    Returns:
        XLSX file content
    """
    df = pd.DataFrame(rows, columns=columns)
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
        worksheet = writer.sheets[sheet_name]
        for column_cells in worksheet.columns:
            header = str(column_cells[0].value or "")
            longest = max(len(str(cell.value or "")) for cell in column_cells)
            width = min(max(longest, len(header)) + 2, 45)
            worksheet.column_dimensions[column_cells[0].column_letter].width = width
    logger.info(f"Exported {len(rows)} rows to sheet '{sheet_name}'")
    return buffer.getvalue()


def write_pdf(
    rows: List[Dict[str, Any]],
    title: str = "Compliance Records Report",
    palette: Optional[Dict[str, str]] = None
) -> bytes:
    """
    Render record rows as a landscape PDF table report.

    Args:
        rows: Rows from build_record_rows
        title: Report title
        palette: Color overrides

    Returns:
        PDF file content
    """
    from reportlab.lib.colors import HexColor, white
    from reportlab.lib.pagesizes import A4, landscape
    from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
    from reportlab.lib.units import inch
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

    palette = {**REPORT_PALETTE, **(palette or {})}

    try:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=landscape(A4),
            leftMargin=0.5*inch,
            rightMargin=0.5*inch,
            topMargin=0.6*inch,
            bottomMargin=0.6*inch,
            title=title,
        )

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            name='ReportTitle',
            parent=styles['Title'],
            fontName='Helvetica-Bold',
            fontSize=20,
            textColor=HexColor(palette["brand_primary"]),
            spaceAfter=6,
        )
        subtitle_style = ParagraphStyle(
            name='ReportSubtitle',
            parent=styles['Normal'],
            fontName='Helvetica',
            fontSize=10,
            textColor=HexColor(palette["gold_accent"]),
        )
        cell_style = ParagraphStyle(
            name='Cell',
            parent=styles['Normal'],
            fontName='Helvetica',
            fontSize=8,
            leading=10,
            textColor=HexColor(palette["text_main"]),
        )

        story = [
            Paragraph(escape(title), title_style),
            Paragraph(f"Generated: {datetime.now().strftime('%B %d, %Y')} | {len(rows)} records", subtitle_style),
            Spacer(1, 12),
        ]

        header = RECORD_COLUMNS
        data = [header] + [
            [Paragraph(escape(str(row.get(column, ""))), cell_style) for column in header]
            for row in rows
        ]
        table = Table(data, repeatRows=1)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), HexColor(palette["table_header"])),
            ('TEXTCOLOR', (0, 0), (-1, 0), white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, 0), 9),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [white, HexColor(palette["table_row_even"])]),
            ('GRID', (0, 0), (-1, -1), 0.5, HexColor(palette["table_border"])),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ]))
        story.append(table)

        doc.build(story)
        pdf_content = buffer.getvalue()
        buffer.close()

        logger.info(f"PDF report generated with {len(rows)} rows")
        return pdf_content

    except Exception as e:
        logger.error(f"PDF generation failed: {e}", exc_info=True)
        raise
