from __future__ import annotations

from typing import Any

UNKNOWN_LABEL = "Noma'lum"

ORDER_STATUS_LABELS = {
    "pending": "Kutilmoqda",
    "accepted": "Qabul qilingan",
    "completed": "Yakunlangan",
    "cancelled": "Bekor qilingan",
    "rejected": "Rad etilgan",
}

ORDER_TYPE_LABELS = {
    "taxi": "Taksi",
    "package": "Paket",
    "cargo": "Yuk",
    "plane": "Aviabilet",
    "train": "Poyezd",
}

DRIVER_APPROVAL_LABELS = {
    True: "Tasdiqlangan",
    False: "Kutilmoqda",
}

TRANSACTION_TYPE_LABELS = {
    "add": "Qo'shildi",
    "subtract": "Ayirildi",
    "deduct": "Ayirildi",
}

PURCHASE_REQUEST_STATUS_LABELS = {
    "pending": "Kutilmoqda",
    "approved": "Tasdiqlangan",
    "rejected": "Rad etilgan",
}

LANGUAGE_LABELS = {
    "uz": "O'zbek",
    "ru": "Русский",
    "en": "English",
}


def label_for(labels: dict[Any, str], value: Any) -> str:
    try:
        return labels.get(value, UNKNOWN_LABEL)
    except TypeError:
        # Unhashable values from a misbehaving backend.
        return UNKNOWN_LABEL


def order_status_label(status: Any) -> str:
    return label_for(ORDER_STATUS_LABELS, status)


def order_type_label(order_type: Any) -> str:
    return label_for(ORDER_TYPE_LABELS, order_type)


def driver_approval_label(is_approved: Any) -> str:
    if not isinstance(is_approved, bool):
        return UNKNOWN_LABEL
    return DRIVER_APPROVAL_LABELS[is_approved]


def transaction_type_label(transaction_type: Any) -> str:
    return label_for(TRANSACTION_TYPE_LABELS, transaction_type)


def purchase_request_status_label(status: Any) -> str:
    return label_for(PURCHASE_REQUEST_STATUS_LABELS, status)


def language_label(language: Any) -> str:
    return label_for(LANGUAGE_LABELS, language)
