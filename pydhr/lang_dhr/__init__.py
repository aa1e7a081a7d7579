from .dhr_catalog import CatalogEntry, CatalogError, MetadataCatalog, default_catalog, load_catalog
from .dhr_completion import TRIGGER_CHARACTERS, CandidateInsertion, QueryContext, complete
from .dhr_hover import HoverPayload, help_document, hover, word_at
from .dhr_language_pack import DHR_FILE_EXTENSIONS, DHR_LANGUAGE_IDS, DhrLanguagePack
from .toolchain_discovery import LocatorConfig, ResolvedToolchain, ToolchainLocator, resolve_toolchain
from .toolchain_runner import InvocationResult, build_command, invoke

__all__ = [
    "CandidateInsertion",
    "CatalogEntry",
    "CatalogError",
    "DHR_FILE_EXTENSIONS",
    "DHR_LANGUAGE_IDS",
    "DhrLanguagePack",
    "HoverPayload",
    "InvocationResult",
    "LocatorConfig",
    "MetadataCatalog",
    "QueryContext",
    "ResolvedToolchain",
    "TRIGGER_CHARACTERS",
    "ToolchainLocator",
    "build_command",
    "complete",
    "default_catalog",
    "help_document",
    "hover",
    "invoke",
    "load_catalog",
    "resolve_toolchain",
    "word_at",
]
