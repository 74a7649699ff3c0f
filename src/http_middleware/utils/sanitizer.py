# src/http_middleware/utils/sanitizer.py
"""
Маскирование чувствительных данных перед записью в лог.

Используется LoggingMiddleware (заголовки запросов и ответов) и
структурированным логгером (extra поля).
"""

import re
from typing import Any, Dict, Mapping


# Чувствительные имена полей и заголовков (case-insensitive, частичное совпадение)
SENSITIVE_KEYS = {
    'password', 'passwd', 'secret', 'token', 'api_key', 'apikey', 'x-api-key',
    'authorization', 'proxy-authorization', 'auth',
    'cookie', 'set-cookie', 'session', 'csrf', 'xsrf',
    'credentials', 'private_key',
}

# Значения, которые маскируем даже под безобидным ключом
SENSITIVE_PATTERNS = [
    (re.compile(r'(Bearer\s+)([A-Za-z0-9\-._~+/]+=*)', re.IGNORECASE), r'\1***REDACTED***'),
    (re.compile(r'(Basic\s+)([A-Za-z0-9+/]+=*)', re.IGNORECASE), r'\1***REDACTED***'),
    (re.compile(r'(api[_-]?key=)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
    (re.compile(r'(token=)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
    (re.compile(r'(password=)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
]

DEFAULT_MASK = "***REDACTED***"


def mask_sensitive_data(data: Any, mask: str = DEFAULT_MASK) -> Any:
    """
    Рекурсивно маскирует чувствительные данные в словарях, списках, строках.

    Args:
        data: Данные (dict, list, tuple, str или любой другой тип)
        mask: Строка-заменитель

    Returns:
        Копия данных с замаскированными значениями

    Examples:
        >>> mask_sensitive_data({"Authorization": "Bearer abc", "Accept": "*/*"})
        {'Authorization': '***REDACTED***', 'Accept': '*/*'}

        >>> mask_sensitive_data("https://api.example.com/?api_key=abc&page=1")
        'https://api.example.com/?api_key=***REDACTED***&page=1'
    """
    if data is None or isinstance(data, (bool, int, float)):
        return data

    if isinstance(data, str):
        return _mask_string(data)

    if isinstance(data, Mapping):
        return _mask_mapping(data, mask)

    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask) for item in data)

    return data


def _mask_mapping(data: Mapping, mask: str) -> Dict[Any, Any]:
    result = {}
    for key, value in data.items():
        if is_sensitive_key(str(key)):
            result[key] = mask
        else:
            result[key] = mask_sensitive_data(value, mask)
    return result


def _mask_string(text: str) -> str:
    for pattern, replacement in SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def is_sensitive_key(key: str) -> bool:
    """Проверяет, содержит ли имя поля/заголовка чувствительное слово."""
    key = key.lower()
    return any(sensitive in key for sensitive in SENSITIVE_KEYS)


def add_sensitive_keys(*keys: str) -> None:
    """
    Расширить список чувствительных ключей.

    Example:
        >>> add_sensitive_keys('x-internal-signature')
    """
    for key in keys:
        SENSITIVE_KEYS.add(key.lower())
