"""Logging setup with credential redaction.

Signed EC2 requests carry the access key id and signature in their
query string or form body, and settings may hold the secret key. The
formatter installed here scrubs those values from every log line.
"""

import logging
import re
import sys

_SENSITIVE_PATTERNS = [
    re.compile(r"(AWSAccessKeyId=)[^&\s]+", re.IGNORECASE),
    re.compile(r"(Signature=)[^&\s]+", re.IGNORECASE),
    re.compile(r"(aws_secret_access_key['\"]?\s*[:=]\s*['\"]?)[^'\"\s,}]+", re.IGNORECASE),
    re.compile(r"(Authorization['\"]?\s*[:=]\s*['\"]?)[^'\"\n]+", re.IGNORECASE),
]


def sanitize_string(text: str) -> str:
    """Redact credentials and signatures from a string.

    :param text: Text to sanitize
    :type text: str
    :return: Text with sensitive values replaced by ``<REDACTED>``
    :rtype: str

    Example:
        >>> sanitize_string("Action=DescribeRegions&Signature=abc123")
        'Action=DescribeRegions&Signature=<REDACTED>'
    """
    for pattern in _SENSITIVE_PATTERNS:
        text = pattern.sub(r"\1<REDACTED>", text)
    return text


class SanitizingFormatter(logging.Formatter):
    """Formatter that removes credentials from the rendered message."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the record, then redact the rendered message.

        :param record: Log record to format
        :type record: logging.LogRecord
        :return: Sanitized log line
        :rtype: str
        """
        record.msg = sanitize_string(record.getMessage())
        record.args = None
        return super().format(record)


# Global flag to track if logging has been set up
_LOGGING_CONFIGURED = False


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once with the sanitizing formatter.

    Later calls only adjust the level.

    :param level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    :type level: str
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        logging.getLogger().setLevel(getattr(logging, level.upper()))
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        SanitizingFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=[handler],
        force=True,
    )

    # httpx logs every request line at INFO, signature included
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _LOGGING_CONFIGURED = True
