"""Clinical summary PDF."""
import re

from ruralcare_app_pkg import db
from ruralcare_app_pkg.models import ConsultationNote
from ruralcare_app_pkg.reports.services import build_patient_report, make_report_id, DEFAULT_DIAGNOSIS
from ruralcare_app_pkg.utils import Identity


def test_report_id_format():
    assert make_report_id(42, now_ms=1717171234567) == 'RPT-234567-42'


def test_report_downloads_as_pdf(client, factory):
    _, doctor = factory.user('doctor', with_doctor=True)
    patient_id = factory.patient(name='Report Subject')

    resp = client.get(f'/api/reports/{patient_id}', headers=doctor)
    assert resp.status_code == 200
    assert resp.mimetype == 'application/pdf'
    assert resp.data.startswith(b'%PDF')
    disposition = resp.headers['Content-Disposition']
    assert 'attachment' in disposition
    assert re.search(rf'RuralCare_Report_RPT-\d{{6}}-{patient_id}\.pdf', disposition)


def test_report_access(client, factory):
    user_id, patient = factory.user('patient')
    own = factory.patient(user_id=user_id)
    other = factory.patient(name='Not Mine')

    assert client.get(f'/api/reports/{own}', headers=patient).status_code == 200
    assert client.get(f'/api/reports/{other}', headers=patient).status_code == 403
    resp = client.get('/api/reports/9999', headers=patient)
    assert resp.status_code == 404
    assert resp.get_json()['error'] == "Patient not found"
    assert client.get(f'/api/reports/{own}').status_code == 401


def test_report_contents(app, factory):
    patient_id = factory.patient(name='Content <Check>', risk_level='high', baseline=False)
    staff = Identity(1, 'Staff', 'staff@example.com', 'admin')

    with app.app_context():
        report = build_patient_report(staff, patient_id)
        assert report['vitals'] == {'heart_rate': 128, 'spo2': 91, 'glucose': 195}
        assert report['diagnosis'] == DEFAULT_DIAGNOSIS
        assert report['prescriptions'] == []

        db.session.add(ConsultationNote(patient_id=patient_id, raw_note='seen', structured_summary='Hypertension'))
        db.session.commit()
        assert build_patient_report(staff, patient_id)['diagnosis'] == 'Hypertension'
