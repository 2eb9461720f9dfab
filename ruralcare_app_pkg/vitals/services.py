# ruralcare_app_pkg/vitals/services.py
# Simulated live vitals: a stored baseline per patient, jittered on every read.

import math
import random
from collections import namedtuple
from datetime import datetime, timezone

from ..models import Patient, PatientVitals

Baseline = namedtuple('Baseline', ['heart_rate', 'spo2', 'glucose'])

# Near-critical, warning-zone and normal starting points per risk level
RISK_BASELINES = {
    'high': Baseline(heart_rate=128, spo2=91, glucose=195),
    'medium': Baseline(heart_rate=108, spo2=93, glucose=155),
    'low': Baseline(heart_rate=78, spo2=98, glucose=92),
}

# metric -> (jitter spread, lower clamp, upper clamp)
JITTER_RULES = {
    'heart_rate': (5, 30, 200),
    'spo2': (2, 70, 100),
    'glucose': (10, 40, 400),
}

RISK_RANK = {'normal': 0, 'warning': 1, 'critical': 2}

_default_rng = random.Random()


def baseline_for_risk(risk_level):
    return RISK_BASELINES.get(risk_level, RISK_BASELINES['low'])


def ensure_vitals_baseline(patient):
    """Attaches a risk-bucketed baseline to `patient` unless it already has one."""
    if patient.vitals_baseline is None:
        base = baseline_for_risk(patient.risk_level)
        patient.vitals_baseline = PatientVitals(heart_rate=base.heart_rate, spo2=base.spo2, glucose=base.glucose)
    return patient.vitals_baseline


def jitter(base, spread, rng=None):
    """base + uniform(-spread, spread), rounded half up."""
    rng = rng or _default_rng
    return int(math.floor(base + rng.uniform(-spread, spread) + 0.5))


def clamp(value, lower, upper):
    return min(upper, max(lower, value))


def jittered_metrics(baseline, rng=None):
    """Returns one simulated reading for a stored baseline. Nothing is persisted."""
    reading = {}
    for metric, (spread, lower, upper) in JITTER_RULES.items():
        reading[metric] = clamp(jitter(getattr(baseline, metric), spread, rng), lower, upper)
    return reading


# --- Risk classification ---

def heart_rate_risk(heart_rate):
    if heart_rate > 130 or heart_rate < 50:
        return 'critical'
    if heart_rate > 100 or heart_rate < 60:
        return 'warning'
    return 'normal'


def spo2_risk(spo2):
    if spo2 <= 90:
        return 'critical'
    if spo2 <= 95:
        return 'warning'
    return 'normal'


def glucose_risk(glucose):
    if glucose > 200 or glucose < 55:
        return 'critical'
    if glucose > 140 or glucose < 70:
        return 'warning'
    return 'normal'


def overall_risk(heart_rate, spo2, glucose):
    levels = [heart_rate_risk(heart_rate), spo2_risk(spo2), glucose_risk(glucose)]
    return max(levels, key=lambda level: RISK_RANK[level])


def build_reading(patient, baseline, rng=None):
    metrics = jittered_metrics(baseline, rng)
    return {
        "patient_id": patient.id,
        "patient_name": patient.name,
        "risk_level": patient.risk_level,
        "heart_rate": metrics['heart_rate'],
        "spo2": metrics['spo2'],
        "glucose": metrics['glucose'],
        "status": overall_risk(metrics['heart_rate'], metrics['spo2'], metrics['glucose']),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def generate_alerts(readings):
    """One alert per non-normal metric across `readings`, critical alerts first."""
    alerts = []
    for r in readings:
        checks = [
            (heart_rate_risk(r['heart_rate']), f"HR {r['heart_rate']} bpm"),
            (spo2_risk(r['spo2']), f"SpO2 {r['spo2']}%"),
            (glucose_risk(r['glucose']), f"Glucose {r['glucose']} mg/dL"),
        ]
        for level, label in checks:
            if level == 'normal':
                continue
            alerts.append({
                "patient_id": r['patient_id'],
                "patient_name": r['patient_name'],
                "message": f"{label} - {level.upper()}",
                "level": level,
            })
    # sorted() is stable, so per-patient order survives within a level
    return sorted(alerts, key=lambda a: RISK_RANK[a['level']], reverse=True)


# --- Store reads ---

def all_readings(rng=None):
    rows = (Patient.query
            .join(PatientVitals, PatientVitals.patient_id == Patient.id)
            .order_by(Patient.name.asc(), Patient.id.asc())
            .all())
    return [build_reading(p, p.vitals_baseline, rng) for p in rows]


def reading_for_user(user_id, rng=None):
    """
    Returns (reading, error_message) for the patient record linked to `user_id`.
    """
    patient = Patient.query.filter_by(user_id=user_id).first()
    if patient is None:
        return None, "No health record found for this account. Visit the clinic to register."
    if patient.vitals_baseline is None:
        return None, "No vitals on file yet."
    return build_reading(patient, patient.vitals_baseline, rng), None
