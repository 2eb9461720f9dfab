# ruralcare_app_pkg/reports/services.py
import time
from datetime import datetime, timedelta, timezone

from werkzeug.exceptions import Forbidden, NotFound

from .. import db
from ..models import Patient, ConsultationNote, Prescription
from ..utils import is_patient
from ..vitals.services import baseline_for_risk

DEFAULT_DIAGNOSIS = "Pending full clinical evaluation"
NEXT_VISIT_DAYS = 7


def make_report_id(patient_id, now_ms=None):
    """RPT-<last 6 digits of the epoch milliseconds>-<patient id>"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"RPT-{str(now_ms)[-6:]}-{patient_id}"


def _format_date(value):
    return value.strftime('%d %b %Y')


def build_patient_report(identity, patient_id):
    """Collects everything the clinical summary PDF shows for one patient."""
    patient = db.session.get(Patient, patient_id)
    if patient is None:
        raise NotFound("Patient not found")
    if is_patient(identity) and patient.user_id != identity.id:
        raise Forbidden("Access denied")

    # Stored baseline, else the starting values of the patient's risk bucket
    if patient.vitals_baseline is not None:
        stored = patient.vitals_baseline
        vitals = {"heart_rate": stored.heart_rate, "spo2": stored.spo2, "glucose": stored.glucose}
    else:
        vitals = baseline_for_risk(patient.risk_level)._asdict()

    latest_note = (ConsultationNote.query
                   .filter_by(patient_id=patient.id)
                   .order_by(ConsultationNote.created_at.desc(), ConsultationNote.id.desc())
                   .first())
    diagnosis = latest_note.structured_summary if latest_note and latest_note.structured_summary else DEFAULT_DIAGNOSIS

    prescriptions = (Prescription.query
                     .filter_by(patient_id=patient.id)
                     .order_by(Prescription.created_at.desc(), Prescription.id.desc())
                     .all())

    today = datetime.now(timezone.utc)
    return {
        "report_id": make_report_id(patient.id),
        "report_date": _format_date(today),
        "next_visit": _format_date(today + timedelta(days=NEXT_VISIT_DAYS)),
        "patient": patient.to_dict(),
        "vitals": vitals,
        "diagnosis": diagnosis,
        "prescriptions": [p.to_dict() for p in prescriptions],
    }
