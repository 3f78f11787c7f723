"""WhatsApp click-to-chat links. Nothing is sent from the server."""
import re
from typing import Optional
from urllib.parse import quote

WHATSAPP_BASE_URL = "https://wa.me"
DEFAULT_COUNTRY_CODE = "91"


def digits_only(phone_number: str) -> str:
    return re.sub(r"\D", "", phone_number or "")


def whatsapp_number(phone_number: str, country_code: Optional[str] = None) -> str:
    """Digits of ``phone_number``, prefixed with ``country_code`` unless it already starts with it.

    Raises:
        ValueError: the phone number has no digits
    """
    number = digits_only(phone_number)
    if not number:
        raise ValueError("Phone number has no digits")
    if country_code and not number.startswith(country_code):
        number = f"{country_code}{number}"
    return number


def build_whatsapp_link(phone_number: str, message: str, country_code: Optional[str] = None) -> str:
    """Build a wa.me link with the message URL-encoded."""
    number = whatsapp_number(phone_number, country_code)
    return f"{WHATSAPP_BASE_URL}/{number}?text={quote(message, safe='')}"


def teacher_contact_message(teacher_name: str) -> str:
    return f"Hello {teacher_name}, I found you on EduConnect Pro and I'm interested in your classes."


def complaint_message(teacher_name: str, student_name: str, complaint: str) -> str:
    return (
        f"Hello, this is a message from {teacher_name} regarding your child, {student_name}:\n\n"
        f"\"{complaint.strip()}\"\n\n"
        f"Please contact us for further details.\n\n"
        f"Thank you,\nEduConnect Pro"
    )
