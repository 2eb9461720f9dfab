# ruralcare_app_pkg/reports/pdf.py
# Renders the patient clinical summary with ReportLab.

from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

GENERAL_ADVICE = ("Ensure adequate hydration, maintain a balanced diet, and monitor symptoms. "
                  "Contact immediately if symptoms worsen.")
FOOTER = ("This is a digitally generated report from RuralCare Healthcare Management. "
          "Not valid for medico-legal purposes without authorized signature.")

STATUS_COLOURS = {'dispensed': colors.HexColor('#16A34A'), 'pending': colors.HexColor('#D97706')}


def _styles():
    base = getSampleStyleSheet()
    return {
        'title': ParagraphStyle('title', parent=base['Title'], textColor=colors.HexColor('#2563EB'), fontSize=20),
        'subtitle': ParagraphStyle('subtitle', parent=base['Normal'], alignment=TA_CENTER,
                                   textColor=colors.HexColor('#64748B'), fontSize=12),
        'heading': ParagraphStyle('heading', parent=base['Heading3'], textColor=colors.HexColor('#1E293B'),
                                  backColor=colors.HexColor('#F1F5F9'), borderPadding=4),
        'body': base['Normal'],
        'muted': ParagraphStyle('muted', parent=base['Italic'], textColor=colors.HexColor('#64748B')),
        'footer': ParagraphStyle('footer', parent=base['Italic'], alignment=TA_CENTER, fontSize=8,
                                 textColor=colors.HexColor('#94A3B8')),
    }


def _field(label, value, style):
    # Paragraph parses its text as markup
    text = escape(str(value)) if value not in (None, '') else '-'
    return Paragraph(f"<b>{label}:</b> {text}", style)


def _prescription_table(prescriptions):
    rows = [["Medicine Name", "Dosage / Strength", "Status"]]
    for rx in prescriptions:
        rows.append([rx['medicine_name'] or '-', rx['medicine_strength'] or '-', rx['status'].capitalize()])

    table = Table(rows, colWidths=[70 * mm, 60 * mm, 40 * mm])
    commands = [
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#E2E8F0')),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.HexColor('#F8FAFC'), colors.white]),
    ]
    for index, rx in enumerate(prescriptions, start=1):
        colour = STATUS_COLOURS.get(rx['status'])
        if colour is not None:
            commands.append(('TEXTCOLOR', (2, index), (2, index), colour))
    table.setStyle(TableStyle(commands))
    return table


def render_patient_report(report):
    """Returns the PDF bytes for a report assembled by build_patient_report."""
    styles = _styles()
    patient = report['patient']
    vitals = report['vitals']

    story = [
        Paragraph("RuralCare Healthcare Management", styles['title']),
        Paragraph("Comprehensive Patient Clinical Report", styles['subtitle']),
        Spacer(1, 8 * mm),
        _field("Report ID", report['report_id'], styles['body']),
        _field("Date", report['report_date'], styles['body']),
        Spacer(1, 6 * mm),

        Paragraph("1. Patient Details", styles['heading']),
        _field("Patient Name", patient['name'], styles['body']),
        _field("Age / Gender", f"{patient['age'] or '-'} Y / {patient['gender'] or '-'}", styles['body']),
        _field("Village / Contact Location", patient['village'], styles['body']),
        _field("Patient ID", patient['id'], styles['body']),
        Spacer(1, 4 * mm),

        Paragraph("2. Clinical Diagnosis &amp; Vitals", styles['heading']),
        _field("Reported Symptoms", patient['symptoms'] or "None reported", styles['body']),
        _field("Clinical Diagnosis", report['diagnosis'], styles['body']),
        Paragraph(f"Heart Rate: {vitals['heart_rate']} bpm &nbsp;&nbsp; SpO2: {vitals['spo2']}% "
                  f"&nbsp;&nbsp; Blood Glucose: {vitals['glucose']} mg/dL", styles['body']),
        Spacer(1, 4 * mm),

        Paragraph("3. Prescription Details", styles['heading']),
    ]
    if report['prescriptions']:
        story.append(_prescription_table(report['prescriptions']))
    else:
        story.append(Paragraph("No active prescriptions found for this patient.", styles['muted']))

    story += [
        Spacer(1, 4 * mm),
        Paragraph("4. Recommendations &amp; Follow-up", styles['heading']),
        _field("General Advice", GENERAL_ADVICE, styles['body']),
        _field("Next Recommended Visit", report['next_visit'], styles['body']),
        Spacer(1, 12 * mm),
        Paragraph(FOOTER, styles['footer']),
    ]

    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, title=f"RuralCare Report {report['report_id']}",
                            leftMargin=18 * mm, rightMargin=18 * mm, topMargin=18 * mm, bottomMargin=18 * mm)
    doc.build(story)
    return buffer.getvalue()
