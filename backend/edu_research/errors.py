from __future__ import annotations
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


class ErrorCategory(str, Enum):
	CREDENTIAL_MISSING = "credential_missing"
	CREDENTIAL_INVALID = "credential_invalid"
	PERMISSION_DENIED = "permission_denied"
	QUOTA_EXCEEDED = "quota_exceeded"
	NETWORK_FAILURE = "network_failure"
	TIMEOUT = "timeout"
	CONTENT_FILTERED = "content_filtered"
	RATE_LIMITED = "rate_limited"
	MODEL_UNAVAILABLE = "model_unavailable"
	INTERNAL_BACKEND_ERROR = "internal_backend_error"
	UNKNOWN = "unknown"


class ClassifiedError(BaseModel):
	category: ErrorCategory
	message: str
	suggestions: List[str] = Field(default_factory=list)
	original: str = ""


class GenerationError(Exception):
	def __init__(self, message: str, status_code: Optional[int] = None) -> None:
		super().__init__(message)
		self.status_code = status_code
		# Filled in by the workspace once the failure has been classified
		self.classified: Optional[ClassifiedError] = None


class CredentialMissingError(Exception):
	pass


class SupersededError(Exception):
	pass


class NoActiveDocumentError(Exception):
	pass


class HistoryEntryNotFound(KeyError):
	pass


DEFAULT_LOCALE = "ar"

# Checked in order, first hit wins; rate limiting before quota since Gemini
# reports both as "exceeded"
_KEYWORDS: List[Tuple[ErrorCategory, Tuple[str, ...]]] = [
	(ErrorCategory.CREDENTIAL_MISSING, ("api key is not configured", "no api key", "missing api key")),
	(ErrorCategory.CREDENTIAL_INVALID, ("api key", "api_key", "unauthorized", "unauthenticated", "status 401")),
	(ErrorCategory.PERMISSION_DENIED, ("permission", "forbidden", "denied", "status 403")),
	(ErrorCategory.RATE_LIMITED, ("rate limit", "rate-limit", "too many requests", "status 429")),
	(ErrorCategory.QUOTA_EXCEEDED, ("quota", "resource_exhausted", "exceeded", "limit")),
	(ErrorCategory.TIMEOUT, ("timeout", "timed out", "deadline")),
	(ErrorCategory.NETWORK_FAILURE, ("network", "connection", "connect", "fetch", "dns")),
	(ErrorCategory.CONTENT_FILTERED, ("safety", "filter", "blocked", "prohibited")),
	(ErrorCategory.MODEL_UNAVAILABLE, ("model", "overload", "unavailable", "status 503")),
	(ErrorCategory.INTERNAL_BACKEND_ERROR, ("internal", "server", "status 500")),
]

_MESSAGES: Dict[ErrorCategory, Dict[str, Tuple[str, List[str]]]] = {
	ErrorCategory.CREDENTIAL_MISSING: {
		"ar": ("لم يتم إعداد مفتاح API بعد", ["افتح الإعدادات وأدخل مفتاح Gemini API الخاص بك"]),
		"en": ("No API key has been configured", ["Open the settings and enter your Gemini API key"]),
		"fr": ("Aucune clé API n'est configurée", ["Ouvrez les paramètres et saisissez votre clé API Gemini"]),
	},
	ErrorCategory.CREDENTIAL_INVALID: {
		"ar": ("مفتاح API غير صالح أو منتهي الصلاحية", ["تحقق من نسخ المفتاح كاملاً دون مسافات", "أنشئ مفتاحاً جديداً من Google AI Studio"]),
		"en": ("The API key is invalid or has expired", ["Check that the key was copied completely, without spaces", "Create a new key in Google AI Studio"]),
		"fr": ("La clé API est invalide ou a expiré", ["Vérifiez que la clé a été copiée entièrement, sans espaces", "Créez une nouvelle clé dans Google AI Studio"]),
	},
	ErrorCategory.PERMISSION_DENIED: {
		"ar": ("تم رفض الوصول إلى الخدمة", ["تأكد من تفعيل Gemini API لمشروعك", "تحقق من أن الخدمة متاحة في منطقتك"]),
		"en": ("Access to the service was denied", ["Make sure the Gemini API is enabled for your project", "Check that the service is available in your region"]),
		"fr": ("L'accès au service a été refusé", ["Vérifiez que l'API Gemini est activée pour votre projet", "Vérifiez que le service est disponible dans votre région"]),
	},
	ErrorCategory.QUOTA_EXCEEDED: {
		"ar": ("تم تجاوز الحد المسموح من الاستخدام", ["انتظر حتى يتجدد الحد اليومي", "راجع خطة الاستخدام والفوترة في حسابك"]),
		"en": ("The usage quota has been exceeded", ["Wait for the daily quota to reset", "Review the plan and billing of your account"]),
		"fr": ("Le quota d'utilisation est dépassé", ["Attendez la réinitialisation du quota quotidien", "Vérifiez l'offre et la facturation de votre compte"]),
	},
	ErrorCategory.NETWORK_FAILURE: {
		"ar": ("مشكلة في الاتصال بالإنترنت", ["تحقق من اتصالك بالإنترنت ثم أعد المحاولة"]),
		"en": ("There is a problem with the internet connection", ["Check your internet connection and try again"]),
		"fr": ("Problème de connexion à Internet", ["Vérifiez votre connexion Internet puis réessayez"]),
	},
	ErrorCategory.TIMEOUT: {
		"ar": ("انتهت مهلة الاتصال بالخدمة", ["أعد المحاولة بعد قليل", "اختر طولاً أقصر للبحث"]),
		"en": ("The connection to the service timed out", ["Try again in a moment", "Choose a shorter length"]),
		"fr": ("Le délai de connexion au service a expiré", ["Réessayez dans un instant", "Choisissez une longueur plus courte"]),
	},
	ErrorCategory.CONTENT_FILTERED: {
		"ar": ("تم رفض المحتوى بسبب سياسات السلامة", ["أعد صياغة الموضوع بطريقة تعليمية محايدة"]),
		"en": ("The content was rejected by the safety policies", ["Rephrase the topic in a neutral, educational way"]),
		"fr": ("Le contenu a été refusé par les règles de sécurité", ["Reformulez le sujet de manière neutre et pédagogique"]),
	},
	ErrorCategory.RATE_LIMITED: {
		"ar": ("تم تجاوز عدد الطلبات المسموح به", ["انتظر دقيقة ثم أعد المحاولة"]),
		"en": ("Too many requests in a short time", ["Wait a minute and try again"]),
		"fr": ("Trop de requêtes en peu de temps", ["Attendez une minute puis réessayez"]),
	},
	ErrorCategory.MODEL_UNAVAILABLE: {
		"ar": ("النموذج المطلوب غير متاح أو مشغول حالياً", ["أعد المحاولة بعد قليل"]),
		"en": ("The requested model is unavailable or busy", ["Try again in a moment"]),
		"fr": ("Le modèle demandé est indisponible ou occupé", ["Réessayez dans un instant"]),
	},
	ErrorCategory.INTERNAL_BACKEND_ERROR: {
		"ar": ("خطأ داخلي في الخدمة", ["أعد المحاولة لاحقاً"]),
		"en": ("The service reported an internal error", ["Try again later"]),
		"fr": ("Le service a signalé une erreur interne", ["Réessayez plus tard"]),
	},
	ErrorCategory.UNKNOWN: {
		"ar": ("حدث خطأ غير متوقع", []),
		"en": ("An unexpected error occurred", []),
		"fr": ("Une erreur inattendue s'est produite", []),
	},
}


def detect_category(raw_message: str) -> ErrorCategory:
	lowered = (raw_message or "").lower()
	for category, keywords in _KEYWORDS:
		if any(keyword in lowered for keyword in keywords):
			return category
	return ErrorCategory.UNKNOWN


def describe(category: ErrorCategory, locale: str = DEFAULT_LOCALE, original: str = "") -> ClassifiedError:
	entries = _MESSAGES[category]
	message, suggestions = entries.get(locale) or entries[DEFAULT_LOCALE]
	return ClassifiedError(category=category, message=message, suggestions=list(suggestions), original=original)


def classify(raw_message: str, locale: str = DEFAULT_LOCALE) -> ClassifiedError:
	return describe(detect_category(raw_message), locale, original=raw_message or "")
