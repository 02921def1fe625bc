"""Secret redaction for source context attached to stack frames.

Source lines around a call site routinely contain credentials (hard-coded
tokens, connection strings, test keys). Context leaving the process can be
passed through SecretRedactor first.

Redaction is fail-closed: if a pattern cannot be compiled or applied, a
RedactionError is raised rather than returning unredacted text.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

log = structlog.get_logger()


class SecurityError(Exception):
    """Base exception for security-related errors."""


class RedactionError(SecurityError):
    """Raised when secret redaction fails."""


class SecretRedactor:
    """Detects and redacts secrets in source lines.

    Usage:
        redactor = SecretRedactor()
        safe_line = redactor.redact('API_KEY = "sk-proj-..."')

    Attributes:
        placeholder: The string secrets are replaced with.
    """

    DEFAULT_PATTERNS: tuple[tuple[str, str], ...] = (
        (
            r"(?i)(api[_-]?key|secret|token|password|passwd|credential)\s*[=:]\s*[\"']?[\w-]{16,}",
            "Generic secret assignment",
        ),
        (r"xox[baprs]-[\w-]+", "Slack token"),
        (r"gh[pousr]_[a-zA-Z0-9]{36}", "GitHub token"),
        (r"github_pat_[a-zA-Z0-9_]{22,}", "GitHub fine-grained PAT"),
        (r"sk-[a-zA-Z0-9]{48}", "OpenAI legacy API key"),
        (r"sk-proj-[a-zA-Z0-9_-]{20,}", "OpenAI project API key"),
        (r"sk-ant-[\w-]{40,}", "Anthropic API key"),
        (r"AKIA[0-9A-Z]{16}", "AWS access key ID"),
        (r"AIza[0-9A-Za-z\-_]{35}", "Google API key"),
        (r"sk_live_[a-zA-Z0-9]{24,}", "Stripe secret key"),
        (
            r"(?i)(postgres(?:ql)?|mysql|mongodb(?:\+srv)?|redis|amqp)://[^:\s]+:[^@\s]+@[^\s\"']+",
            "Connection string with credentials",
        ),
        (
            r"-----BEGIN (?:RSA |EC |DSA |OPENSSH |PGP )?PRIVATE KEY(?: BLOCK)?-----",
            "Private key header",
        ),
        (r"eyJ[a-zA-Z0-9_-]*\.eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*", "JWT token"),
    )

    def __init__(
        self,
        placeholder: str = "[REDACTED]",
        custom_patterns: Sequence[tuple[str, str]] | None = None,
    ) -> None:
        """Compile the default patterns followed by any custom ones.

        Args:
            placeholder: String that replaces each detected secret.
            custom_patterns: Extra (regex, description) pairs.

        Raises:
            RedactionError: If a pattern does not compile.
        """
        self.placeholder = placeholder
        self._patterns = tuple(
            self._compile(source, description)
            for source, description in (*self.DEFAULT_PATTERNS, *(custom_patterns or ()))
        )

    @staticmethod
    def _compile(source: str, description: str) -> re.Pattern[str]:
        try:
            return re.compile(source)
        except re.error as e:
            log.error("pattern_compilation_failed", pattern=description, error=str(e))
            raise RedactionError(f"Failed to compile secret pattern '{source}': {e}") from e

    def redact(self, text: str) -> str:
        """Replace every detected secret in text with the placeholder.

        Raises:
            RedactionError: If a pattern fails to apply.
        """
        if not text:
            return text

        try:
            for pattern in self._patterns:
                text = pattern.sub(self.placeholder, text)
        except Exception as e:
            log.error("redaction_failed", error=str(e))
            raise RedactionError(f"Redaction failed: {e}") from e
        return text

    def redact_lines(self, lines: Iterable[str]) -> tuple[str, ...]:
        """Redact each line of a context block."""
        return tuple(self.redact(line) for line in lines)
