"""Message catalogs for the enquiry form (English and Arabic)."""

from __future__ import annotations

from typing import Dict

DEFAULT_LOCALE = "en"

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "enquiry.title": "Send an Enquiry",
        "enquiry.successTitle": "Enquiry sent",
        "enquiry.successMessage": "Thank you! Our team will get back to you shortly.",
        "enquiry.errorTitle": "Something went wrong",
        "enquiry.errorDefault": "Failed to send enquiry. Please try again later.",
        "enquiry.submit.send": "Send Enquiry",
        "enquiry.submit.sending": "Sending...",
        "enquiry.requiredNote": "* All fields except company are required",
    },
    "ar": {
        "enquiry.title": "أرسل استفسارًا",
        "enquiry.successTitle": "تم إرسال الاستفسار",
        "enquiry.successMessage": "شكرًا لك! سيتواصل معك فريقنا قريبًا.",
        "enquiry.errorTitle": "حدث خطأ ما",
        "enquiry.errorDefault": "تعذر إرسال الاستفسار. يرجى المحاولة لاحقًا.",
        "enquiry.submit.send": "إرسال الاستفسار",
        "enquiry.submit.sending": "جارٍ الإرسال...",
        "enquiry.requiredNote": "* جميع الحقول مطلوبة باستثناء الشركة",
    },
}


def translate(key: str, locale: str = DEFAULT_LOCALE) -> str:
    """Look up `key` in the locale, falling back to English, then to the key itself."""
    catalog = MESSAGES.get(locale) or MESSAGES[DEFAULT_LOCALE]
    return catalog.get(key) or MESSAGES[DEFAULT_LOCALE].get(key, key)
