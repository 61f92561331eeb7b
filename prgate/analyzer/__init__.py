"""Static analyzer: independent heuristic scanners producing Suggestions."""

from .base import FileScanner, Scanner, Severity, SourceFile, Suggestion, SuggestionType, collect_source_files
from .components import ComponentComplexityScanner
from .consistency import ConsistencyScanner
from .duplicates import DuplicateBlockScanner
from .engine import StaticAnalyzer, default_scanners
from .long_functions import LongFunctionScanner
from .type_safety import TypeSafetyScanner
from .unused_imports import UnusedImportScanner
