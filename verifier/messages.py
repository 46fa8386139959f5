"""
messages.py - User-Facing Messages
===================================
Every message shown to an end user, in Bengali ("bn", the default) and
English ("en"). Internal log messages are always English and live next to
the code that logs them.
"""

from typing import Dict

MESSAGES: Dict[str, Dict[str, str]] = {
    "bn": {
        "empty_key": "অনুগ্রহ করে একটি এ্যাডমিট নাম্বার লিখুন।",
        "short_key": "এ্যাডমিট নাম্বার কমপক্ষে {min_length} অক্ষরের হতে হবে।",
        "not_found": (
            "এই এ্যাডমিট নাম্বারের কোনো তথ্য পাওয়া যায়নি। "
            "{table_count}টি শীটে মোট {record_count}টি রেকর্ড অনুসন্ধান করা হয়েছে।"
        ),
        "empty_dataset": "কোনো ডেটা পাওয়া যায়নি। অনুগ্রহ করে পরে আবার চেষ্টা করুন।",
        "rate_limited": "অনেক বেশি অনুরোধ। অনুগ্রহ করে কিছুক্ষণ পর আবার চেষ্টা করুন।",
        "access_denied": "API অ্যাক্সেস সমস্যা। অনুগ্রহ করে পরে আবার চেষ্টা করুন।",
        "sheet_missing": "Google Sheet খুঁজে পাওয়া যায়নি। অনুগ্রহ করে Sheet ID পরীক্ষা করুন।",
        "generic": "একটি ত্রুটি ঘটেছে। অনুগ্রহ করে পরে আবার চেষ্টা করুন।",
    },
    "en": {
        "empty_key": "Please enter an admit number.",
        "short_key": "The admit number must be at least {min_length} characters long.",
        "not_found": (
            "No record was found for this admit number. "
            "Searched {record_count} records in {table_count} sheets."
        ),
        "empty_dataset": "No data was found. Please try again later.",
        "rate_limited": "Too many requests. Please wait a moment and try again.",
        "access_denied": "There is a problem accessing the API. Please try again later.",
        "sheet_missing": "The Google Sheet could not be found. Please check the Sheet ID.",
        "generic": "Something went wrong. Please try again later.",
    },
}

DEFAULT_LOCALE = "bn"


def message(key: str, locale: str = DEFAULT_LOCALE, **params) -> str:
    """
    Look up a message and fill in its placeholders.

    Unknown locales fall back to DEFAULT_LOCALE.

    Example:
        message("short_key", "en", min_length=3)
        -> "The admit number must be at least 3 characters long."
    """
    table = MESSAGES.get(locale, MESSAGES[DEFAULT_LOCALE])
    return table[key].format(**params)
