from accounts.serializers.doctor import account_base_dict


def patient_to_dict(user) -> dict:
    profile = getattr(user, 'patient_profile', None)
    data = account_base_dict(user)
    data.update({
        'dateOfBirth': profile.date_of_birth.isoformat() if profile and profile.date_of_birth else None,
        'gender': profile.gender if profile else '',
        'phoneNumber': profile.phone_number if profile else '',
        'address': profile.address if profile else '',
        'governorateCode': profile.governorate_code if profile else '',
    })
    return data
