import pytest
from rest_framework.exceptions import PermissionDenied

from accounts.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from accounts.models import AuditEntry, DoctorProfile, User
from accounts.services import lifecycle
from accounts.services.audit import list_entries
from accounts.services.lifecycle import create_doctor, deactivate_account, reactivate_account, record_export

pytestmark = pytest.mark.django_db


@pytest.fixture
def doctor(admin_user, catalogs, doctor_data):
    user, _ = create_doctor(admin_user, doctor_data())
    return user


# ---------------------------------------------------------------------
# create_doctor
# ---------------------------------------------------------------------
def test_create_doctor_returns_credentials_once(admin_user, catalogs, doctor_data):
    user, creds = create_doctor(admin_user, doctor_data(years_of_experience=7, education_code='phd'))

    assert creds.email == 'omar.said.l900@patient360.gov.sy'
    assert user.email == creds.email
    assert user.role == User.ROLE_DOCTOR
    assert user.is_active
    assert user.deactivation is None
    assert user.created_by == admin_user
    # only the hash is stored
    assert user.password != creds.password
    assert user.check_password(creds.password)

    profile = DoctorProfile.objects.get(user=user)
    assert profile.license_number == 'L900'
    assert profile.years_of_experience == 7
    assert profile.education_code == 'phd'


def test_create_doctor_appends_audit_entry(admin_user, catalogs, doctor_data):
    user, _ = create_doctor(admin_user, doctor_data())
    entries = list_entries()
    assert len(entries) == 1
    e = entries[0]
    assert e.action_code == AuditEntry.ADD_DOCTOR
    assert e.admin == admin_user
    assert e.admin_name == 'Rana Haddad'
    assert e.target_role == 'doctor'
    assert e.target_id == user.id
    assert 'Omar Said' in e.description
    assert 'Cardiologist' in e.description


def test_duplicate_doctor_is_a_conflict(admin_user, catalogs, doctor_data):
    create_doctor(admin_user, doctor_data())
    with pytest.raises(ConflictError):
        create_doctor(admin_user, doctor_data())
    assert User.objects.filter(role='doctor').count() == 1
    assert AuditEntry.objects.count() == 1


def test_license_number_conflict_ignores_case(admin_user, catalogs, doctor_data):
    create_doctor(admin_user, doctor_data())
    with pytest.raises(ConflictError) as exc:
        create_doctor(admin_user, doctor_data(first_name='Sami', license_number='l900'))
    assert 'licenseNumber' in exc.value.detail


def test_national_id_conflict(admin_user, catalogs, doctor_data):
    create_doctor(admin_user, doctor_data(national_id='12345678901'))
    with pytest.raises(ConflictError) as exc:
        create_doctor(admin_user, doctor_data(national_id='12345678901', license_number='L901'))
    assert 'nationalId' in exc.value.detail


def test_generated_email_conflict(admin_user, catalogs, doctor_data):
    create_doctor(admin_user, doctor_data())
    # different license, same normalized email
    with pytest.raises(ConflictError) as exc:
        create_doctor(admin_user, doctor_data(first_name='Om ar', license_number='L 900'))
    assert 'email' in exc.value.detail


def test_concurrent_duplicate_maps_integrity_error_to_conflict(admin_user, catalogs, doctor_data, monkeypatch):
    create_doctor(admin_user, doctor_data())
    # simulate losing the race: pre-checks see nothing, the database does
    monkeypatch.setattr('accounts.repositories.find_by_license_number', lambda *a, **kw: None)
    monkeypatch.setattr('accounts.repositories.find_by_national_id', lambda *a, **kw: None)
    monkeypatch.setattr('accounts.repositories.find_by_email', lambda *a, **kw: None)
    with pytest.raises(ConflictError):
        create_doctor(admin_user, doctor_data())
    assert User.objects.filter(role='doctor').count() == 1
    assert AuditEntry.objects.count() == 1


def test_missing_fields_are_reported_per_field(admin_user, catalogs):
    with pytest.raises(ValidationError) as exc:
        create_doctor(admin_user, {'first_name': 'Omar'})
    detail = exc.value.detail
    for field in ('lastName', 'nationalId', 'licenseNumber', 'specializationCode',
                  'governorateCode', 'clinicAddress', 'phoneNumber'):
        assert field in detail
    assert 'firstName' not in detail


@pytest.mark.parametrize('overrides, field', [
    ({'national_id': '1234567890'}, 'nationalId'),
    ({'national_id': '12345abcde1'}, 'nationalId'),
    ({'specialization_code': 'astrologer'}, 'specializationCode'),
    ({'governorate_code': 'atlantis'}, 'governorateCode'),
    ({'education_code': 'kindergarten'}, 'educationCode'),
    ({'years_of_experience': -1}, 'yearsOfExperience'),
    ({'years_of_experience': 'many'}, 'yearsOfExperience'),
])
def test_invalid_doctor_input(admin_user, catalogs, doctor_data, overrides, field):
    with pytest.raises(ValidationError) as exc:
        create_doctor(admin_user, doctor_data(**overrides))
    assert field in exc.value.detail
    assert not User.objects.filter(role='doctor').exists()
    assert not AuditEntry.objects.exists()


def test_free_text_is_cleaned(admin_user, catalogs, doctor_data):
    user, _ = create_doctor(admin_user, doctor_data(clinic_address='<b>Baghdad St.</b> 12'))
    assert user.doctor_profile.clinic_address == 'Baghdad St. 12'


def test_ampersand_in_name_is_kept_verbatim(admin_user, catalogs, doctor_data):
    user, credentials = create_doctor(admin_user, doctor_data(first_name='Tom&Jerry'))
    assert user.first_name == 'Tom&Jerry'
    assert credentials.email.startswith('tom&jerry.said.l900@')
    assert ';' not in credentials.email
    assert user.email == credentials.email


def test_markup_in_name_is_rejected(admin_user, catalogs, doctor_data):
    with pytest.raises(ValidationError) as exc:
        create_doctor(admin_user, doctor_data(first_name='<b>Omar</b>'))
    assert 'firstName' in exc.value.detail
    assert not User.objects.filter(role='doctor').exists()


def test_only_admins_can_create_doctors(catalogs, doctor_data, make_patient):
    with pytest.raises(PermissionDenied):
        create_doctor(make_patient(), doctor_data())


# ---------------------------------------------------------------------
# deactivate / reactivate
# ---------------------------------------------------------------------
def test_deactivate_doctor(admin_user, doctor, catalogs):
    account = deactivate_account(doctor.id, 'doctor', 'retirement', '—', admin_user)

    assert account.is_active is False
    assert account.deactivation['reasonCode'] == 'retirement'
    assert account.deactivation['notes'] == '—'
    assert account.deactivation['byAdminId'] == admin_user.id
    assert account.deactivation['atTimestamp']

    latest = list_entries()[0]
    assert latest.action_code == AuditEntry.DEACTIVATE_DOCTOR
    assert latest.target_id == doctor.id
    assert 'Retirement' in latest.description
    assert latest.detail == {'reasonCode': 'retirement', 'notes': '—'}


def test_deactivate_twice_is_invalid_state(admin_user, doctor, catalogs):
    deactivate_account(doctor.id, 'doctor', 'retirement', '', admin_user)
    with pytest.raises(InvalidStateError):
        deactivate_account(doctor.id, 'doctor', 'fraud', '', admin_user)
    doctor.refresh_from_db()
    assert doctor.deactivation_reason == 'retirement'
    assert AuditEntry.objects.filter(action_code=AuditEntry.DEACTIVATE_DOCTOR).count() == 1


def test_deactivate_unknown_account(admin_user, catalogs):
    before = AuditEntry.objects.count()
    with pytest.raises(NotFoundError):
        deactivate_account(999999, 'doctor', 'retirement', '', admin_user)
    assert AuditEntry.objects.count() == before


def test_deactivate_with_wrong_role_is_not_found(admin_user, doctor, catalogs):
    with pytest.raises(NotFoundError):
        deactivate_account(doctor.id, 'patient', 'retirement', '', admin_user)
    doctor.refresh_from_db()
    assert doctor.is_active


def test_deactivate_with_unknown_reason(admin_user, doctor, catalogs):
    with pytest.raises(ValidationError) as exc:
        deactivate_account(doctor.id, 'doctor', 'bored', '', admin_user)
    assert 'reasonCode' in exc.value.detail
    doctor.refresh_from_db()
    assert doctor.is_active


def test_deactivate_with_unknown_role(admin_user, doctor, catalogs):
    with pytest.raises(ValidationError):
        deactivate_account(doctor.id, 'admin', 'retirement', '', admin_user)


def test_notes_are_cleaned(admin_user, doctor, catalogs):
    account = deactivate_account(doctor.id, 'doctor', 'other', '<i>moved</i> abroad', admin_user)
    assert account.deactivation_notes == 'moved abroad'


def test_notes_keep_plain_text(admin_user, doctor, catalogs):
    account = deactivate_account(doctor.id, 'doctor', 'other', 'Moved to Aleppo & Homs', admin_user)
    assert account.deactivation_notes == 'Moved to Aleppo & Homs'
    assert list_entries()[0].detail['notes'] == 'Moved to Aleppo & Homs'


def test_deactivate_loses_race_on_stale_read(admin_user, doctor, catalogs, monkeypatch):
    stale = User.objects.get(pk=doctor.pk)
    deactivate_account(doctor.id, 'doctor', 'retirement', '', admin_user)
    # the second caller still sees the account as active
    monkeypatch.setattr('accounts.repositories.find_by_id', lambda *a, **kw: stale)

    with pytest.raises(InvalidStateError):
        deactivate_account(doctor.id, 'doctor', 'fraud', '', admin_user)
    doctor.refresh_from_db()
    assert doctor.deactivation_reason == 'retirement'
    assert AuditEntry.objects.filter(action_code=AuditEntry.DEACTIVATE_DOCTOR).count() == 1


def test_reactivate_loses_race_on_stale_read(admin_user, doctor, catalogs, monkeypatch):
    deactivate_account(doctor.id, 'doctor', 'retirement', '', admin_user)
    stale = User.objects.get(pk=doctor.pk)
    reactivate_account(doctor.id, 'doctor', admin_user)
    monkeypatch.setattr('accounts.repositories.find_by_id', lambda *a, **kw: stale)

    with pytest.raises(InvalidStateError):
        reactivate_account(doctor.id, 'doctor', admin_user)
    assert AuditEntry.objects.filter(action_code=AuditEntry.REACTIVATE_DOCTOR).count() == 1


def test_reactivate_active_account_is_invalid_state(admin_user, doctor):
    with pytest.raises(InvalidStateError):
        reactivate_account(doctor.id, 'doctor', admin_user)


def test_reactivate_clears_deactivation(admin_user, doctor, catalogs):
    deactivate_account(doctor.id, 'doctor', 'user_request', 'on leave', admin_user)
    account = reactivate_account(doctor.id, 'doctor', admin_user)

    assert account.is_active
    assert account.deactivation is None
    assert account.deactivation_reason == ''
    assert account.reactivation['byAdminId'] == admin_user.id

    latest = list_entries()[0]
    assert latest.action_code == AuditEntry.REACTIVATE_DOCTOR
    assert latest.detail == {'previousReasonCode': 'user_request'}


def test_patient_lifecycle(admin_user, catalogs, make_patient):
    patient = make_patient()
    deactivate_account(patient.id, 'patient', 'death', '', admin_user)
    reactivate_account(patient.id, 'patient', admin_user)
    codes = [e.action_code for e in list_entries()]
    assert codes == [AuditEntry.REACTIVATE_PATIENT, AuditEntry.DEACTIVATE_PATIENT]


def test_failed_audit_append_rolls_back_deactivation(admin_user, doctor, catalogs, monkeypatch):
    def broken(**kwargs):
        raise RuntimeError('audit store unavailable')

    monkeypatch.setattr(lifecycle, 'append_entry', broken)
    with pytest.raises(RuntimeError):
        deactivate_account(doctor.id, 'doctor', 'retirement', '', admin_user)

    doctor.refresh_from_db()
    assert doctor.is_active
    assert doctor.deactivated_at is None
    assert not AuditEntry.objects.filter(action_code=AuditEntry.DEACTIVATE_DOCTOR).exists()


def test_failed_audit_append_rolls_back_creation(admin_user, catalogs, doctor_data, monkeypatch):
    def broken(**kwargs):
        raise RuntimeError('audit store unavailable')

    monkeypatch.setattr(lifecycle, 'append_entry', broken)
    with pytest.raises(RuntimeError):
        create_doctor(admin_user, doctor_data())
    assert not User.objects.filter(role='doctor').exists()
    assert not DoctorProfile.objects.exists()


def test_record_export(admin_user):
    entry = record_export(admin_user, 'patient', 42)
    assert entry.action_code == AuditEntry.EXPORT_PATIENTS
    assert entry.detail == {'count': 42}
    assert entry.target_id is None
