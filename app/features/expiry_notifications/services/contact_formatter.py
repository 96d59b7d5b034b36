"""
Phone number normalization for the text and chat channels.
"""

DEFAULT_COUNTRY_CODE = "+94"
DEFAULT_TRUNK_PREFIX = "0"


def format_phone_number(
    phone_number: str,
    country_code: str = DEFAULT_COUNTRY_CODE,
    trunk_prefix: str = DEFAULT_TRUNK_PREFIX,
) -> str:
    """
    Convert a local phone number to international form.

        0771234567    -> +94771234567
        +94771234567  -> +94771234567
        771234567     -> +94771234567

    Never raises; anything unrecognised gets the country code prepended.
    """
    phone_number = (phone_number or "").strip()

    if phone_number.startswith(trunk_prefix):
        return f"{country_code}{phone_number[len(trunk_prefix):]}"

    if phone_number.startswith("+"):
        return phone_number

    return f"{country_code}{phone_number}"
