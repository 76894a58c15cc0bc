"""Field rules of member records."""
from datetime import date
from decimal import Decimal

import pytest

from apps.members.validators import (
    MANDATORY_FIELDS,
    ReasonCode,
    age_on,
    mandatory_errors,
    validate,
    validate_fields,
)

TODAY = date(2026, 6, 15)

INVALID_VALUES = {
    'full_name': 'A1',
    'date_of_birth': '1990-13-01',
    'gender': 'Unknown',
    'blood_group': 'AB',
    'mobile': '5123456789',
    'email': 'asha.example.com',
    'aadhaar_number': '1234',
    'pan_number': 'ABCDE1234',
    'address': '',
    'city': ' ',
    'state': None,
    'pincode': '011001',
}


def error_code(field, value):
    check = validate(field, value, today=TODAY)
    return None if check.ok else check.error.code


class TestFullName:

    def test_accepts_letters_and_spaces(self):
        check = validate('full_name', '  Asha Verma ', today=TODAY)
        assert check.ok
        assert check.value == 'Asha Verma'

    @pytest.mark.parametrize('value, code', [
        ('', ReasonCode.REQUIRED),
        (None, ReasonCode.REQUIRED),
        ('Al', ReasonCode.TOO_SHORT),
        ('Asha V3rma', ReasonCode.INVALID_CHARACTERS),
        ("D'Souza", ReasonCode.INVALID_CHARACTERS),
    ])
    def test_rejects(self, value, code):
        assert error_code('full_name', value) == code


class TestDateOfBirth:

    def test_age_uses_month_and_day(self):
        assert age_on(date(2000, 6, 16), TODAY) == 25
        assert age_on(date(2000, 6, 15), TODAY) == 26

    def test_accepts_iso_string_and_date(self):
        assert validate('date_of_birth', '1990-04-12', today=TODAY).value == date(1990, 4, 12)
        assert validate('date_of_birth', date(1990, 4, 12), today=TODAY).value == date(1990, 4, 12)

    def test_newborn_and_centenarian_are_valid(self):
        assert error_code('date_of_birth', TODAY) is None
        assert error_code('date_of_birth', date(1926, 6, 15)) is None

    def test_age_bounds(self):
        assert error_code('date_of_birth', date(1925, 6, 15)) == ReasonCode.AGE_OUT_OF_RANGE
        assert error_code('date_of_birth', date(2026, 6, 16)) == ReasonCode.AGE_OUT_OF_RANGE

    @pytest.mark.parametrize('value', ['2023-02-30', '12/04/1990', 'yesterday'])
    def test_invalid_dates(self, value):
        assert error_code('date_of_birth', value) == ReasonCode.INVALID_DATE

    def test_missing(self):
        assert error_code('date_of_birth', '') == ReasonCode.REQUIRED


class TestChoices:

    @pytest.mark.parametrize('value', ['Male', 'Female', 'Other'])
    def test_genders(self, value):
        assert error_code('gender', value) is None

    def test_unknown_gender(self):
        assert error_code('gender', 'M') == ReasonCode.INVALID_CHOICE

    @pytest.mark.parametrize('value', ['A+', 'A-', 'B+', 'B-', 'O+', 'O-', 'AB+', 'AB-'])
    def test_blood_groups(self, value):
        assert error_code('blood_group', value) is None

    def test_unknown_blood_group(self):
        assert error_code('blood_group', 'C+') == ReasonCode.INVALID_CHOICE


class TestContact:

    def test_mobile_with_leading_five_is_rejected(self):
        assert error_code('mobile', '5123456789') == ReasonCode.INVALID_MOBILE

    @pytest.mark.parametrize('value', ['987654321', '98765432101', '98765x3210', '+919876543210'])
    def test_mobile_shape(self, value):
        assert error_code('mobile', value) == ReasonCode.INVALID_MOBILE

    def test_mobile_ok(self):
        assert error_code('mobile', '6000000000') is None

    @pytest.mark.parametrize('value', ['asha@example', '@example.com', 'asha@@example.com', 'asha example.com'])
    def test_email_shape(self, value):
        assert error_code('email', value) == ReasonCode.INVALID_EMAIL

    def test_email_ok(self):
        assert error_code('email', 'asha.verma@mail.example.in') is None


class TestMeasures:

    def test_height_is_normalized(self):
        assert validate('height_cm', '162', today=TODAY).value == Decimal('162.0')
        assert validate('height_cm', 170.25, today=TODAY).value == Decimal('170.3')

    @pytest.mark.parametrize('field, value', [
        ('height_cm', 49.9), ('height_cm', 251), ('weight_kg', 0.5), ('weight_kg', '201'),
    ])
    def test_out_of_range(self, field, value):
        assert error_code(field, value) == ReasonCode.OUT_OF_RANGE

    @pytest.mark.parametrize('value', ['tall', True, 'nan'])
    def test_not_a_number(self, value):
        assert error_code('weight_kg', value) == ReasonCode.NOT_A_NUMBER

    def test_bounds_are_inclusive(self):
        assert error_code('height_cm', 50) is None
        assert error_code('height_cm', 250) is None
        assert error_code('weight_kg', 1) is None
        assert error_code('weight_kg', 200) is None


class TestKyc:

    def test_aadhaar_separators_are_stripped(self):
        assert validate('aadhaar_number', '1234-5678 9012', today=TODAY).value == '123456789012'

    @pytest.mark.parametrize('value', ['12345678901', '1234567890123', '1234 5678 90AB'])
    def test_aadhaar_shape(self, value):
        assert error_code('aadhaar_number', value) == ReasonCode.INVALID_AADHAAR

    def test_pan_is_stored_uppercase(self):
        assert validate('pan_number', 'abcde1234f', today=TODAY).value == 'ABCDE1234F'

    @pytest.mark.parametrize('value', ['ABCD1234F', 'ABCDE12345', '1BCDE1234F'])
    def test_pan_shape(self, value):
        assert error_code('pan_number', value) == ReasonCode.INVALID_PAN

    @pytest.mark.parametrize('value', ['011001', '41100', '4110011', '41100a'])
    def test_pincode_shape(self, value):
        assert error_code('pincode', value) == ReasonCode.INVALID_PINCODE

    @pytest.mark.parametrize('field', ['address', 'city', 'state'])
    def test_address_parts_required(self, field):
        assert error_code(field, '   ') == ReasonCode.REQUIRED


class TestColumnLimits:

    def test_name_longer_than_its_column(self):
        check = validate('full_name', 'A' * 121, today=TODAY)
        assert not check.ok
        assert check.error.field == 'full_name'
        assert check.error.code == ReasonCode.TOO_LONG
        assert check.error.message == 'Must be at most 120 characters'

    def test_name_at_the_limit(self):
        assert error_code('full_name', 'A' * 120) is None

    @pytest.mark.parametrize('field, value', [
        ('city', 'B' * 81),
        ('state', 'B' * 81),
        ('nominee_name', 'C' * 121),
        ('nominee_relation', 'C' * 31),
    ])
    def test_other_bounded_columns(self, field, value):
        assert error_code(field, value) == ReasonCode.TOO_LONG

    def test_unbounded_text_columns(self):
        assert error_code('address', 'Flat 12, ' * 200) is None
        assert error_code('medical_conditions', 'none ' * 500) is None

    def test_payload_reports_the_long_field(self):
        _, errors = validate_fields({'full_name': 'Asha Verma', 'city': 'P' * 100}, today=TODAY)
        assert [(e.field, e.code) for e in errors] == [('city', ReasonCode.TOO_LONG)]


def test_unknown_field():
    assert error_code('favourite_colour', 'blue') == ReasonCode.UNKNOWN_FIELD


class TestValidateFields:

    def test_partial_payload_checks_only_supplied_fields(self):
        cleaned, errors = validate_fields({'full_name': 'Asha Verma'}, today=TODAY)
        assert errors == []
        assert cleaned == {'full_name': 'Asha Verma'}

    def test_reports_every_failing_field(self):
        _, errors = validate_fields({'mobile': '5123456789', 'pincode': '011001'}, today=TODAY)
        assert sorted(e.field for e in errors) == ['mobile', 'pincode']

    def test_blank_optional_values_clear_the_field(self):
        cleaned, errors = validate_fields({'height_cm': '', 'nominee_name': ''}, today=TODAY)
        assert errors == []
        assert cleaned == {'height_cm': None, 'nominee_name': ''}

    def test_mandatory_rule_lists_missing_fields(self):
        _, errors = validate_fields({'full_name': 'Asha Verma'}, require_mandatory=True, today=TODAY)
        missing = {e.field for e in errors if e.code == ReasonCode.REQUIRED}
        assert missing == set(MANDATORY_FIELDS) - {'full_name'}

    def test_mandatory_errors_flags_exactly_the_invalid_field(self, valid_fields):
        assert mandatory_errors(valid_fields, today=TODAY) == []

        for field in MANDATORY_FIELDS:
            broken = {**valid_fields, field: INVALID_VALUES[field]}
            errors = mandatory_errors(broken, today=TODAY)
            assert [e.field for e in errors] == [field]

    def test_error_payload_shape(self):
        check = validate('mobile', '5123456789', today=TODAY)
        assert check.error.as_dict() == {
            'code': 'invalid_mobile',
            'field': 'mobile',
            'message': 'Mobile number must be 10 digits starting with 6, 7, 8 or 9',
        }
