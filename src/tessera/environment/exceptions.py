"""Exceptions for the Tessera component engine.

Exception Hierarchy:
ComponentError (base)
├── ComponentNotFoundError    # Source cannot locate manifest/template
├── ManifestError             # Malformed manifest or markup
│   ├── DirectiveSyntaxError  # Unparseable directive (e.g. use-for)
│   └── PayloadError          # Invalid JSON in a bound import attribute
├── ComponentRuntimeError     # Render-time failure with import chain
│   ├── CyclicImportError     # Import chain revisits an ancestor
│   └── ImportDepthError      # max_import_depth exceeded
└── PluginError               # Recoverable plugin failure
    ├── ScriptCompileError    # Enhancement script failed to compile
    └── StyleGenerationError  # Utility stylesheet generation failed

Structural failures (missing component, malformed manifest, import cycle)
abort the enclosing render. Plugin failures are caught by the renderer, logged,
and the corresponding injection is skipped.

Example:
    ```
    T-RUN-001: Cyclic import of 'pages/home'
      Import chain: pages/home → widgets/card → pages/home
      Hint: Remove one of the imports so the chain no longer loops
    ```

"""

from __future__ import annotations

from enum import Enum

from tessera.environment import terminal


class ErrorCode(Enum):
    """Searchable error codes, formatted ``T-{CATEGORY}-{NUMBER}``.

    Categories: SRC (component sources), PAR (manifest and markup parsing),
    RUN (render time), PLG (plugins).
    """

    COMPONENT_NOT_FOUND = "T-SRC-001"

    MANIFEST_INVALID = "T-PAR-001"
    DIRECTIVE_SYNTAX = "T-PAR-002"
    PAYLOAD_INVALID = "T-PAR-003"

    CYCLIC_IMPORT = "T-RUN-001"
    IMPORT_DEPTH = "T-RUN-002"
    RUNTIME_ERROR = "T-RUN-003"

    SCRIPT_COMPILE = "T-PLG-001"
    STYLE_GENERATION = "T-PLG-002"

    @property
    def category(self) -> str:
        """Error category (e.g., 'source', 'parser', 'runtime', 'plugin')."""
        prefix = self.value.split("-")[1]
        return {
            "SRC": "source",
            "PAR": "parser",
            "RUN": "runtime",
            "PLG": "plugin",
        }.get(prefix, "unknown")


class ComponentError(Exception):
    """Base exception for all component errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format the error as a short terminal diagnostic without traceback noise."""
        header = str(self)
        if self.code and self.code.value not in header:
            return terminal.format_error_header(self.code.value, header)
        return header


class ComponentNotFoundError(ComponentError):
    """A component source could not locate the component.

    Raised by sources when the manifest or the template of a URI is missing.

    Example:
            >>> env.render("widgets/missing")
        ComponentNotFoundError: Component 'widgets/missing' not found. Did you mean 'widgets/button'?

    """

    code: ErrorCode | None = ErrorCode.COMPONENT_NOT_FOUND

    def __init__(self, uri: str, message: str | None = None, available: list[str] | None = None):
        self.uri = uri
        self.available = sorted(available) if available else []
        super().__init__(self._format_message(message))

    def _format_message(self, message: str | None) -> str:
        msg = message or f"Component '{self.uri}' not found"
        if self.available:
            from difflib import get_close_matches

            matches = get_close_matches(self.uri, self.available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{terminal.suggestion(matches[0])}'?"
            else:
                msg += f". Available: {', '.join(self.available[:10])}"
                if len(self.available) > 10:
                    msg += f" ... ({len(self.available)} total)"
        return msg


class ManifestError(ComponentError):
    """Malformed component manifest or markup.

    Attributes:
        message: Error description
        uri: Component URI the manifest belongs to
        filename: Manifest path, when file-backed
    """

    code: ErrorCode | None = ErrorCode.MANIFEST_INVALID

    def __init__(self, message: str, uri: str | None = None, filename: str | None = None):
        self.message = message
        self.uri = uri
        self.filename = filename
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        location = self.filename or self.uri
        if location:
            return f"{self.message}\n  --> {terminal.component(location)}"
        return self.message


class DirectiveSyntaxError(ManifestError):
    """A directive attribute could not be parsed.

    Example:
            >>> '<li use-for="items">'
        DirectiveSyntaxError: Invalid use-for expression 'items' (expected 'item in collection')
    """

    code: ErrorCode | None = ErrorCode.DIRECTIVE_SYNTAX


class PayloadError(ManifestError):
    """A bound attribute on an import placeholder did not hold valid JSON."""

    code: ErrorCode | None = ErrorCode.PAYLOAD_INVALID


class ComponentRuntimeError(ComponentError):
    """Render-time failure with the chain of imports that led to it.

    Attributes:
        message: Error description
        uri: Component being rendered when the error occurred
        import_chain: URIs from the root component down to ``uri``
        suggestion: Actionable fix suggestion
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        uri: str | None = None,
        import_chain: list[str] | None = None,
        suggestion: str | None = None,
    ):
        self.message = message
        self.uri = uri
        self.import_chain = list(import_chain or [])
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        if self.import_chain:
            parts.append(f"  Import chain: {terminal.format_import_chain(self.import_chain)}")
        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")
        return "\n".join(parts)


class CyclicImportError(ComponentRuntimeError):
    """An import chain revisited a component already being rendered."""

    code: ErrorCode | None = ErrorCode.CYCLIC_IMPORT

    def __init__(self, uri: str, import_chain: list[str]):
        super().__init__(
            f"Cyclic import of '{uri}'",
            uri=uri,
            import_chain=[*import_chain, uri],
            suggestion="Remove one of the imports so the chain no longer loops",
        )


class ImportDepthError(ComponentRuntimeError):
    """Nested imports went deeper than ``max_import_depth``."""

    code: ErrorCode | None = ErrorCode.IMPORT_DEPTH

    def __init__(self, uri: str, max_depth: int, import_chain: list[str]):
        self.max_depth = max_depth
        super().__init__(
            f"Maximum import depth exceeded ({max_depth}) when importing '{uri}'",
            uri=uri,
            import_chain=[*import_chain, uri],
            suggestion="Flatten the component tree or raise max_import_depth",
        )


class PluginError(ComponentError):
    """Base for recoverable plugin failures.

    The renderer catches these, logs a warning and skips the injection.
    """

    def __init__(self, message: str, uri: str | None = None):
        self.message = message
        self.uri = uri
        if uri:
            message = f"{message} (component '{uri}')"
        super().__init__(message)


class ScriptCompileError(PluginError):
    """The enhancement script could not be transpiled or minified."""

    code: ErrorCode | None = ErrorCode.SCRIPT_COMPILE


class StyleGenerationError(PluginError):
    """The utility stylesheet could not be generated."""

    code: ErrorCode | None = ErrorCode.STYLE_GENERATION
