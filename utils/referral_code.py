import re
import secrets
import string

SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
SUFFIX_LENGTH = 6


def generate_referral_code(full_name: str | None) -> str:
    """
    Build a referral code from the user's name and a random suffix.

    Whitespace is removed and the name lowercased, an empty name becomes "user".

    Examples:
        "Jane Doe" -> "janedoe-k3x9q1"
        None       -> "user-0a7bz2"
    """
    prefix = re.sub(r"\s+", "", full_name or "").lower() or "user"
    suffix = "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{prefix}-{suffix}"
