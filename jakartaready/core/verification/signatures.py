"""Failure signatures for classifying a failed run's output.

Signatures are checked in order; the first one that matches any output
line picks the category. Namespace-specific signatures come before the
generic ones they overlap with, so a ``ClassNotFoundException`` for a
``javax.servlet`` class is a namespace mismatch, not a classpath issue.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .models import ErrorAnalysis, ErrorCategory

EXACT_CONFIDENCE = 0.9
GENERIC_CONFIDENCE = 0.6
UNKNOWN_CONFIDENCE = 0.3

_MIGRATED_JAVAX = (
    r"javax[./](?:servlet|persistence|validation|ws[./]rs|ejb|inject|enterprise|faces|json|jms|mail"
    r"|transaction|xml[./]bind|xml[./]ws|annotation[./](?:security|sql|PostConstruct|PreDestroy|Resource|Priority)"
    r"|websocket|activation|el|interceptor|decorator|batch|resource)\b"
)
_CLASS_MISSING = r"(?:ClassNotFoundException|NoClassDefFoundError)"


@dataclass(frozen=True)
class FailureSignature:
    name: str
    pattern: re.Pattern
    category: ErrorCategory
    confidence: float
    fixes: Tuple[str, ...]


def _sig(name: str, pattern: str, category: ErrorCategory, confidence: float, *fixes: str) -> FailureSignature:
    return FailureSignature(name, re.compile(pattern), category, confidence, tuple(fixes))


FAILURE_SIGNATURES: Tuple[FailureSignature, ...] = (
    _sig(
        "javax-class-not-found",
        _CLASS_MISSING + r"[:\s]+" + _MIGRATED_JAVAX,
        ErrorCategory.NAMESPACE_MISMATCH,
        EXACT_CONFIDENCE,
        "Replace remaining javax.* references with their jakarta.* equivalents",
        "Check third-party libraries for Jakarta-compatible releases",
    ),
    _sig(
        "jakarta-class-not-found",
        _CLASS_MISSING + r"[:\s]+jakarta[./]",
        ErrorCategory.MISSING_JAKARTA_DEPENDENCY,
        EXACT_CONFIDENCE,
        "Add the Jakarta API dependency that provides the missing class",
        "Verify the runtime container supports Jakarta EE 9 or later",
    ),
    _sig(
        "mixed-namespace-cast",
        r"ClassCastException.*(?:javax\..*jakarta\.|jakarta\..*javax\.)",
        ErrorCategory.MIXED_NAMESPACE,
        EXACT_CONFIDENCE,
        "Remove javax artifacts that duplicate jakarta APIs on the classpath",
        "Migrate all modules to the jakarta namespace together",
    ),
    _sig(
        "namespace-linkage-error",
        r"(?:NoSuchMethodError|AbstractMethodError|IncompatibleClassChangeError|VerifyError).*(?:javax|jakarta)[./]",
        ErrorCategory.BINARY_INCOMPATIBILITY,
        EXACT_CONFIDENCE,
        "Recompile all modules against the Jakarta APIs",
        "Upgrade libraries compiled against javax to Jakarta-compatible versions",
    ),
    _sig(
        "unsupported-class-version",
        r"UnsupportedClassVersionError|has been compiled by a more recent version of the Java Runtime",
        ErrorCategory.JAVA_VERSION,
        EXACT_CONFIDENCE,
        "Run on a Java version at least as new as the one the artifact was compiled for",
        "Jakarta EE 10 and Spring Boot 3 require Java 17 or later",
    ),
    _sig(
        "linkage-error",
        r"NoSuchMethodError|AbstractMethodError|IncompatibleClassChangeError|VerifyError|LinkageError",
        ErrorCategory.BINARY_INCOMPATIBILITY,
        GENERIC_CONFIDENCE,
        "Check for libraries compiled against incompatible API versions",
    ),
    _sig(
        "class-not-found",
        _CLASS_MISSING + r"|Unable to access jarfile|no main manifest attribute|Could not find or load main class",
        ErrorCategory.CLASSPATH,
        GENERIC_CONFIDENCE,
        "Check the runtime classpath and packaged dependencies",
    ),
    _sig(
        "configuration-error",
        r"APPLICATION FAILED TO START|BeanCreationException|Failed to load ApplicationContext"
        r"|Could not resolve placeholder|Invalid configuration",
        ErrorCategory.CONFIGURATION,
        GENERIC_CONFIDENCE,
        "Review application configuration and descriptors for javax-era settings",
    ),
)


def classify_failure(
    stdout_lines: Iterable[str],
    stderr_lines: Iterable[str],
    exit_code: Optional[int] = None,
    signatures: Tuple[FailureSignature, ...] = FAILURE_SIGNATURES,
) -> ErrorAnalysis:
    """Pick the error category for a failed run from its output."""
    lines = list(stderr_lines) + list(stdout_lines)

    first: Optional[FailureSignature] = None
    first_line = ""
    matched: List[str] = []
    for signature in signatures:
        line = next((text for text in lines if signature.pattern.search(text)), None)
        if line is None:
            continue
        matched.append(signature.name)
        if first is None:
            first = signature
            first_line = line.strip()

    if first is None:
        message = next((text.strip() for text in reversed(lines) if text.strip()), "")
        if not message:
            message = f"Process exited with code {exit_code}"
        return ErrorAnalysis(
            category=ErrorCategory.UNKNOWN,
            message=message,
            matched_patterns=(),
            suggested_fixes=("Inspect the application output for the root cause",),
            confidence=UNKNOWN_CONFIDENCE,
        )

    return ErrorAnalysis(
        category=first.category,
        message=first_line,
        matched_patterns=tuple(matched),
        suggested_fixes=first.fixes,
        confidence=first.confidence,
    )
