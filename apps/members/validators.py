"""
Field rules for member records.

Each rule is a pure function ``rule(raw_value, today) -> normalized value``
that raises ``django.core.exceptions.ValidationError`` with one of the
``ReasonCode`` values. ``validate`` wraps a single rule into a ``FieldCheck``
and ``validate_fields`` applies the table to a payload, optionally enforcing
the cross-field rule that every mandatory field is present and valid.
"""
import enum
import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.apps import apps
from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator
from django.utils import timezone
from django.utils.dateparse import parse_date


class ReasonCode(str, enum.Enum):
    REQUIRED = 'required'
    TOO_SHORT = 'too_short'
    TOO_LONG = 'too_long'
    INVALID_CHARACTERS = 'invalid_characters'
    INVALID_DATE = 'invalid_date'
    AGE_OUT_OF_RANGE = 'age_out_of_range'
    INVALID_CHOICE = 'invalid_choice'
    INVALID_MOBILE = 'invalid_mobile'
    INVALID_EMAIL = 'invalid_email'
    NOT_A_NUMBER = 'not_a_number'
    OUT_OF_RANGE = 'out_of_range'
    INVALID_AADHAAR = 'invalid_aadhaar'
    INVALID_PAN = 'invalid_pan'
    INVALID_PINCODE = 'invalid_pincode'
    UNKNOWN_FIELD = 'unknown_field'


GENDERS = ('Male', 'Female', 'Other')
BLOOD_GROUPS = ('A+', 'A-', 'B+', 'B-', 'O+', 'O-', 'AB+', 'AB-')

MIN_AGE = 0
MAX_AGE = 100
HEIGHT_RANGE = (Decimal('50'), Decimal('250'))
WEIGHT_RANGE = (Decimal('1'), Decimal('200'))

MANDATORY_FIELDS = (
    'full_name',
    'date_of_birth',
    'gender',
    'blood_group',
    'mobile',
    'email',
    'aadhaar_number',
    'pan_number',
    'address',
    'city',
    'state',
    'pincode',
)

OPTIONAL_FIELDS = (
    'height_cm',
    'weight_kg',
    'medical_conditions',
    'nominee_name',
    'nominee_relation',
)


@dataclass(frozen=True)
class FieldError:
    field: str
    code: ReasonCode
    message: str

    def as_dict(self):
        return {'code': self.code.value, 'field': self.field, 'message': self.message}


@dataclass(frozen=True)
class FieldCheck:
    field: str
    value: object = None
    error: FieldError = None

    @property
    def ok(self):
        return self.error is None


# ===== Regex-shaped rules =====

name_validator = RegexValidator(
    regex=r'^[A-Za-z\s]+$',
    message='Name may only contain letters and spaces',
    code=ReasonCode.INVALID_CHARACTERS.value,
)
mobile_validator = RegexValidator(
    regex=r'^[6-9][0-9]{9}$',
    message='Mobile number must be 10 digits starting with 6, 7, 8 or 9',
    code=ReasonCode.INVALID_MOBILE.value,
)
email_validator = RegexValidator(
    regex=r'^[^@\s]+@[^@\s]+\.[^@\s]+$',
    message='Enter an email address like name@example.com',
    code=ReasonCode.INVALID_EMAIL.value,
)
aadhaar_validator = RegexValidator(
    regex=r'^[0-9]{12}$',
    message='Aadhaar number must have exactly 12 digits',
    code=ReasonCode.INVALID_AADHAAR.value,
)
pan_validator = RegexValidator(
    regex=r'^[A-Z]{5}[0-9]{4}[A-Z]$',
    message='PAN must look like ABCDE1234F',
    code=ReasonCode.INVALID_PAN.value,
)
pincode_validator = RegexValidator(
    regex=r'^[1-9][0-9]{5}$',
    message='PIN code must be 6 digits and cannot start with 0',
    code=ReasonCode.INVALID_PINCODE.value,
)

AADHAAR_SEPARATORS = re.compile(r'[\s-]')


def _text(value):
    if value is None:
        return ''
    return str(value).strip()


def _required(value, label):
    text = _text(value)
    if not text:
        raise ValidationError(f'{label} is required', code=ReasonCode.REQUIRED.value)
    return text


def column_max_length(field_name):
    """max_length of the member column storing ``field_name`` (None for unbounded text)"""
    member_model = apps.get_model('members', 'Member')
    return member_model._meta.get_field(field_name).max_length


def _check_length(field_name, value):
    limit = column_max_length(field_name)
    if limit and isinstance(value, str) and len(value) > limit:
        raise ValidationError(
            f'Must be at most {limit} characters',
            code=ReasonCode.TOO_LONG.value,
        )


def age_on(born, today):
    """Completed years between ``born`` and ``today``."""
    had_birthday = (today.month, today.day) >= (born.month, born.day)
    return today.year - born.year - (0 if had_birthday else 1)


# ===== Field rules =====

def clean_full_name(value, today=None, label='Full name'):
    text = _required(value, label)
    if len(text) < 3:
        raise ValidationError(f'{label} must be at least 3 characters', code=ReasonCode.TOO_SHORT.value)
    name_validator(text)
    return text


def clean_date_of_birth(value, today=None):
    if value is None or value == '':
        raise ValidationError('Date of birth is required', code=ReasonCode.REQUIRED.value)

    if isinstance(value, date):
        born = value
    else:
        try:
            born = parse_date(_text(value))
        except ValueError:
            born = None
        if born is None:
            raise ValidationError('Enter a valid date (YYYY-MM-DD)', code=ReasonCode.INVALID_DATE.value)

    today = today or timezone.localdate()
    age = age_on(born, today)
    if age < MIN_AGE or age > MAX_AGE:
        raise ValidationError(
            f'Age must be between {MIN_AGE} and {MAX_AGE} years',
            code=ReasonCode.AGE_OUT_OF_RANGE.value,
        )
    return born


def clean_gender(value, today=None):
    text = _required(value, 'Gender')
    if text not in GENDERS:
        raise ValidationError(f"Gender must be one of {', '.join(GENDERS)}", code=ReasonCode.INVALID_CHOICE.value)
    return text


def clean_blood_group(value, today=None):
    text = _required(value, 'Blood group')
    if text not in BLOOD_GROUPS:
        raise ValidationError(
            f"Blood group must be one of {', '.join(BLOOD_GROUPS)}",
            code=ReasonCode.INVALID_CHOICE.value,
        )
    return text


def clean_mobile(value, today=None):
    text = _required(value, 'Mobile number')
    mobile_validator(text)
    return text


def clean_email(value, today=None):
    text = _required(value, 'Email')
    email_validator(text)
    return text


def _clean_measure(value, label, bounds, unit):
    if isinstance(value, bool):
        raise ValidationError(f'{label} must be a number', code=ReasonCode.NOT_A_NUMBER.value)
    try:
        number = Decimal(_text(value))
    except InvalidOperation:
        raise ValidationError(f'{label} must be a number', code=ReasonCode.NOT_A_NUMBER.value)
    if not number.is_finite():
        raise ValidationError(f'{label} must be a number', code=ReasonCode.NOT_A_NUMBER.value)

    low, high = bounds
    if number < low or number > high:
        raise ValidationError(
            f'{label} must be between {low} and {high} {unit}',
            code=ReasonCode.OUT_OF_RANGE.value,
        )
    return number.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)


def clean_height(value, today=None):
    return _clean_measure(value, 'Height', HEIGHT_RANGE, 'cm')


def clean_weight(value, today=None):
    return _clean_measure(value, 'Weight', WEIGHT_RANGE, 'kg')


def clean_aadhaar(value, today=None):
    text = AADHAAR_SEPARATORS.sub('', _required(value, 'Aadhaar number'))
    aadhaar_validator(text)
    return text


def clean_pan(value, today=None):
    text = _required(value, 'PAN').upper()
    pan_validator(text)
    return text


def clean_pincode(value, today=None):
    text = _required(value, 'PIN code')
    pincode_validator(text)
    return text


def clean_address(value, today=None):
    return _required(value, 'Address')


def clean_city(value, today=None):
    return _required(value, 'City')


def clean_state(value, today=None):
    return _required(value, 'State')


def clean_free_text(value, today=None):
    return _text(value)


def clean_nominee_name(value, today=None):
    if not _text(value):
        return ''
    return clean_full_name(value, label='Nominee name')


FIELD_RULES = {
    'full_name': clean_full_name,
    'date_of_birth': clean_date_of_birth,
    'gender': clean_gender,
    'blood_group': clean_blood_group,
    'mobile': clean_mobile,
    'email': clean_email,
    'height_cm': clean_height,
    'weight_kg': clean_weight,
    'aadhaar_number': clean_aadhaar,
    'pan_number': clean_pan,
    'address': clean_address,
    'city': clean_city,
    'state': clean_state,
    'pincode': clean_pincode,
    'medical_conditions': clean_free_text,
    'nominee_name': clean_nominee_name,
    'nominee_relation': clean_free_text,
}


def validate(field_name, raw_value, today=None):
    """Check one field and return its ``FieldCheck``."""
    rule = FIELD_RULES.get(field_name)
    if rule is None:
        return FieldCheck(
            field=field_name,
            error=FieldError(field_name, ReasonCode.UNKNOWN_FIELD, f'Unknown field: {field_name}'),
        )

    try:
        value = rule(raw_value, today=today)
        _check_length(field_name, value)
    except ValidationError as exc:
        return FieldCheck(
            field=field_name,
            error=FieldError(field_name, ReasonCode(exc.code), exc.messages[0]),
        )
    return FieldCheck(field=field_name, value=value)


def validate_fields(fields, require_mandatory=False, today=None):
    """
    Validate a payload of member fields.

    Returns ``(cleaned, errors)``. Blank optional values clear the field
    (``None``). With ``require_mandatory`` every mandatory field must be
    present and valid, which is the rule a lock commit has to pass.
    """
    today = today or timezone.localdate()
    cleaned = {}
    errors = []

    for field_name, raw_value in fields.items():
        if field_name in OPTIONAL_FIELDS and _text(raw_value) == '':
            cleaned[field_name] = None if field_name in ('height_cm', 'weight_kg') else ''
            continue

        check = validate(field_name, raw_value, today=today)
        if check.ok:
            cleaned[field_name] = check.value
        else:
            errors.append(check.error)

    if require_mandatory:
        for field_name in MANDATORY_FIELDS:
            if field_name not in fields:
                errors.append(FieldError(field_name, ReasonCode.REQUIRED, 'This field is required'))

    return cleaned, errors


def mandatory_errors(fields, today=None):
    """All failures of the cross-field rule for a complete member payload."""
    payload = {name: fields.get(name) for name in MANDATORY_FIELDS}
    payload.update({name: fields[name] for name in OPTIONAL_FIELDS if name in fields})
    _, errors = validate_fields(payload, require_mandatory=True, today=today)
    return errors
