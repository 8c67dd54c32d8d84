from rest_framework import serializers


class DoctorCreateSerializer(serializers.Serializer):
    """Request shape for doctor creation.

    Only types and presence are checked here; catalog membership,
    national id format and uniqueness are enforced by the lifecycle
    service.
    """
    firstName = serializers.CharField(max_length=150)
    lastName = serializers.CharField(max_length=150)
    nationalId = serializers.CharField(max_length=32)
    licenseNumber = serializers.CharField(max_length=64)
    specializationCode = serializers.CharField(max_length=64)
    subSpecialization = serializers.CharField(required=False, allow_blank=True, max_length=255)
    governorateCode = serializers.CharField(max_length=64)
    city = serializers.CharField(required=False, allow_blank=True, max_length=128)
    clinicAddress = serializers.CharField(max_length=255)
    phoneNumber = serializers.CharField(max_length=32)
    educationCode = serializers.CharField(required=False, allow_blank=True, max_length=64)
    yearsOfExperience = serializers.IntegerField(required=False, allow_null=True)
    institution = serializers.CharField(required=False, allow_blank=True, max_length=255)
    gender = serializers.ChoiceField(choices=['male', 'female'], required=False, allow_blank=True)
    dateOfBirth = serializers.DateField(required=False, allow_null=True)

    def to_service_data(self) -> dict:
        v = self.validated_data
        return {
            'first_name': v['firstName'],
            'last_name': v['lastName'],
            'national_id': v['nationalId'],
            'license_number': v['licenseNumber'],
            'specialization_code': v['specializationCode'],
            'sub_specialization': v.get('subSpecialization', ''),
            'governorate_code': v['governorateCode'],
            'city': v.get('city', ''),
            'clinic_address': v['clinicAddress'],
            'phone_number': v['phoneNumber'],
            'education_code': v.get('educationCode', ''),
            'years_of_experience': v.get('yearsOfExperience'),
            'institution': v.get('institution', ''),
            'gender': v.get('gender', ''),
            'date_of_birth': v.get('dateOfBirth'),
        }


def doctor_to_dict(user) -> dict:
    profile = getattr(user, 'doctor_profile', None)
    data = account_base_dict(user)
    data.update({
        'licenseNumber': profile.license_number if profile else None,
        'specializationCode': profile.specialization_code if profile else None,
        'subSpecialization': profile.sub_specialization if profile else '',
        'governorateCode': profile.governorate_code if profile else None,
        'city': profile.city if profile else '',
        'clinicAddress': profile.clinic_address if profile else '',
        'phoneNumber': profile.phone_number if profile else '',
        'educationCode': profile.education_code if profile else '',
        'yearsOfExperience': profile.years_of_experience if profile else 0,
        'institution': profile.institution if profile else '',
        'gender': profile.gender if profile else '',
        'dateOfBirth': profile.date_of_birth.isoformat() if profile and profile.date_of_birth else None,
    })
    return data


def account_base_dict(user) -> dict:
    return {
        'id': user.id,
        'role': user.role,
        'firstName': user.first_name,
        'lastName': user.last_name,
        'name': user.display_name,
        'nationalId': user.national_id,
        'email': user.email,
        'isActive': user.is_active,
        'createdAt': user.date_joined.isoformat() if user.date_joined else None,
        'deactivation': user.deactivation,
        'reactivation': user.reactivation,
    }
