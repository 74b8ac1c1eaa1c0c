"""
Locale resolution and translation cache package.

This package resolves the language pack to use at startup and maintains the
on-disk cache of materialized translations.
"""

from .types import (
    LanguagePackEntry,
    NLSResolveContext,
    NLSConfiguration,
    InternalNLSConfiguration,
)
from .result import Diagnostic, DiagnosticKind, Ok, Err
from .manifest import load_language_packs, resolve_pack_locale
from .cache import (
    CachePaths,
    CacheHit,
    CacheMiss,
    TranslationCache,
    mark_cache_corrupted,
)
from .materializer import materialize, materialize_messages
from .resolver import (
    NLSResolver,
    PerformanceMarks,
    ResolutionObserver,
    default_configuration,
    resolve_nls_configuration,
)
from .bundle import load_message_bundle, localize

__all__ = [
    # Types
    "LanguagePackEntry",
    "NLSResolveContext",
    "NLSConfiguration",
    "InternalNLSConfiguration",
    # Results
    "Diagnostic",
    "DiagnosticKind",
    "Ok",
    "Err",
    # Lookup and cache
    "load_language_packs",
    "resolve_pack_locale",
    "CachePaths",
    "CacheHit",
    "CacheMiss",
    "TranslationCache",
    "mark_cache_corrupted",
    "materialize",
    "materialize_messages",
    # Resolution
    "NLSResolver",
    "PerformanceMarks",
    "ResolutionObserver",
    "default_configuration",
    "resolve_nls_configuration",
    # Runtime
    "load_message_bundle",
    "localize",
]
