"""Localized strings used when showing gateway errors to a user."""

from typing import Dict

DEFAULT_LANGUAGE = "en"

ERROR_TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "ja": {
        "unexpected": "予期しないエラーが発生しました。もう一度お試しください。",
        "apiError": "AIサービスとの通信中にエラーが発生しました: {message}",
        "networkError": "ネットワークエラーが発生しました。インターネット接続を確認して、もう一度お試しください。",
        "retry": "再試行",
        "badRequest": "無効なリクエストです",
        "unauthorized": "認証が必要です",
        "forbidden": "アクセスが拒否されました",
        "notFound": "リソースが見つかりません",
        "tooManyRequests": "リクエストが多すぎます。しばらく待ってから再試行してください",
        "serviceUnavailable": "サービスが一時的に利用できません。しばらく待ってから再試行してください",
        "genericError": "エラーが発生しました",
    },
    "en": {
        "unexpected": "An unexpected error occurred. Please try again.",
        "apiError": "An error occurred while communicating with the AI service: {message}",
        "networkError": "A network error occurred. Please check your internet connection and try again.",
        "retry": "Retry",
        "badRequest": "Invalid request",
        "unauthorized": "Authentication required",
        "forbidden": "Access denied",
        "notFound": "Resource not found",
        "tooManyRequests": "Too many requests. Please try again later",
        "serviceUnavailable": "Service temporarily unavailable. Please try again later",
        "genericError": "An error occurred",
    },
}

COMPENDIUM_TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "ja": {"noResults": "該当する情報が見つかりませんでした。別のキーワードでお試しください。"},
    "en": {"noResults": "No information found. Please try a different search term."},
}


def error_translations(language: str) -> Dict[str, str]:
    return ERROR_TRANSLATIONS.get(language, ERROR_TRANSLATIONS[DEFAULT_LANGUAGE])


def compendium_translations(language: str) -> Dict[str, str]:
    return COMPENDIUM_TRANSLATIONS.get(
        language, COMPENDIUM_TRANSLATIONS[DEFAULT_LANGUAGE]
    )
