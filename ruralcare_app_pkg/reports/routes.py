# ruralcare_app_pkg/reports/routes.py
from io import BytesIO

from flask import Blueprint, current_app, g, send_file
from ..utils import login_required
from .services import build_patient_report
from .pdf import render_patient_report

reports_bp = Blueprint('reports_bp', __name__)


@reports_bp.route('/reports/<int:patient_id>', methods=['GET'])
@login_required
def patient_report(patient_id):
    report = build_patient_report(g.current_user, patient_id)
    pdf_bytes = render_patient_report(report)
    current_app.logger.info(f"Report {report['report_id']} generated by user {g.current_user.id}")
    return send_file(
        BytesIO(pdf_bytes),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=f"RuralCare_Report_{report['report_id']}.pdf",
    )
