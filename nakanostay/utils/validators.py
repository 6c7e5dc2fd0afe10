"""Custom validation utilities."""

import re
from dataclasses import dataclass
from enum import Enum

from email_validator import EmailNotValidError, validate_email

CEDULA_LENGTH = 10
CEDULA_WEIGHTS = (2, 1, 2, 1, 2, 1, 2, 1, 2)
MIN_PROVINCE_CODE = 1
MAX_PROVINCE_CODE = 24
MAX_NATURAL_PERSON_THIRD_DIGIT = 6

_ASCII_DIGITS = frozenset("0123456789")


class CedulaRejection(str, Enum):
    """Why an identity number was rejected."""

    WRONG_LENGTH = "wrong_length"
    NON_DIGIT = "non_digit"
    BAD_PROVINCE = "bad_province"
    BAD_THIRD_DIGIT = "bad_third_digit"
    CHECKSUM_MISMATCH = "checksum_mismatch"


REJECTION_MESSAGES: dict[CedulaRejection, str] = {
    CedulaRejection.WRONG_LENGTH: "Identity number must have exactly 10 digits",
    CedulaRejection.NON_DIGIT: "Identity number must contain only digits",
    CedulaRejection.BAD_PROVINCE: "Identity number has an unknown province code",
    CedulaRejection.BAD_THIRD_DIGIT: "Identity number is not a natural-person cédula",
    CedulaRejection.CHECKSUM_MISMATCH: "Identity number check digit does not match",
}


@dataclass(frozen=True)
class CedulaValidation:
    """Result of validating an identity number."""

    valid: bool
    reason: CedulaRejection | None = None

    @property
    def message(self) -> str | None:
        return REJECTION_MESSAGES[self.reason] if self.reason else None


def cedula_check_digit(first_nine: str) -> int:
    """Compute the modulus-10 check digit for the first nine cédula digits."""
    total = 0
    for digit, weight in zip(first_nine, CEDULA_WEIGHTS):
        product = int(digit) * weight
        if product > 9:
            product -= 9
        total += product
    remainder = total % 10
    return 0 if remainder == 0 else 10 - remainder


def validate_cedula(cedula: str) -> CedulaValidation:
    """Validate an Ecuadorian national identity number (cédula).

    Format: 10 ASCII digits. The first two are the province code (01-24),
    the third is below 7 for natural persons and the last one is a
    modulus-10 check digit over the first nine with weights 2,1,2,1,...

    Never raises; every input gets a structured result.

    Args:
        cedula: Identity number to validate

    Returns:
        CedulaValidation: ``valid`` plus the rejection reason, if any
    """
    if not isinstance(cedula, str) or len(cedula) != CEDULA_LENGTH:
        return CedulaValidation(False, CedulaRejection.WRONG_LENGTH)

    # str.isdigit() accepts non-ASCII digits such as "٣"
    if not set(cedula) <= _ASCII_DIGITS:
        return CedulaValidation(False, CedulaRejection.NON_DIGIT)

    province = int(cedula[:2])
    if not MIN_PROVINCE_CODE <= province <= MAX_PROVINCE_CODE:
        return CedulaValidation(False, CedulaRejection.BAD_PROVINCE)

    if int(cedula[2]) > MAX_NATURAL_PERSON_THIRD_DIGIT:
        return CedulaValidation(False, CedulaRejection.BAD_THIRD_DIGIT)

    if cedula_check_digit(cedula[:9]) != int(cedula[9]):
        return CedulaValidation(False, CedulaRejection.CHECKSUM_MISMATCH)

    return CedulaValidation(True)


def is_valid_email(email: str) -> bool:
    """Syntax check of an e-mail address; no DNS lookup."""
    try:
        validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def validate_ecuadorian_phone(phone: str) -> bool:
    """Validate Ecuadorian phone number.

    Accepted formats:
    - +593991234567 (international mobile)
    - 0991234567 (local mobile)
    - 022345678 (local landline)
    """
    cleaned = re.sub(r"[\s\-\(\)]", "", phone)

    if cleaned.startswith("+593"):
        return len(cleaned) in (12, 13) and cleaned[4:].isdigit()

    if cleaned.startswith("0"):
        return len(cleaned) in (9, 10) and cleaned.isdigit()

    return False


def mask_sensitive_data(data: str, visible_chars: int = 4) -> str:
    """Mask sensitive data showing only last few characters.

    Args:
        data: Sensitive data to mask
        visible_chars: Number of characters to show at end

    Returns:
        str: Masked string like '******4065'
    """
    if len(data) <= visible_chars:
        return "*" * len(data)

    masked_length = len(data) - visible_chars
    return "*" * masked_length + data[-visible_chars:]
