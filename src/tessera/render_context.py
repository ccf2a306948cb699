"""Tessera RenderSession: per-render state threaded through recursive renders.

One session frame exists per component being rendered. The root frame is
created by ``Environment.render_async``; the import resolver derives a child
frame for every import with ``child_session``. Frames of one top-level render
share the document-wide pieces:

- the load options
- the ``HeadAssets`` writer of the root document

and carry their own:

- ``ancestry``: URIs from the root down to this frame (cycle detection)
- ``depth``: number of imports between the root and this frame
- ``settings``: the manifest of the component this frame renders
- ``lifted``: serialized head elements this frame contributed, recorded so a
  cache hit can replay them into another document

Nothing is stored in globals or context variables, so concurrent top-level
renders never see each other's state.

"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tessera.environment.exceptions import CyclicImportError, ImportDepthError

if TYPE_CHECKING:
    from tessera.assets import HeadAssets
    from tessera.environment.sources import LoadOptions
    from tessera.manifest import ComponentSettings


@dataclass(eq=False)
class _DocumentState:
    """Document-wide state shared by every frame of one render."""

    assets: HeadAssets | None = None


@dataclass(eq=False)
class RenderSession:
    """Per-component render frame.

    Attributes:
        options: Load options for every lookup in this render
        ancestry: URIs from the root component down to this frame
        depth: Import depth (0 for the root)
        max_depth: Maximum allowed import depth
        settings: Manifest of the component being rendered (set by the renderer)
        lifted: Serialized head elements contributed by this frame
    """

    options: LoadOptions
    ancestry: list[str] = field(default_factory=list)
    depth: int = 0
    max_depth: int = 50
    settings: ComponentSettings | None = None
    lifted: list[str] = field(default_factory=list)
    _state: _DocumentState = field(default_factory=_DocumentState)

    @classmethod
    def for_root(cls, uri: str, options: LoadOptions, *, max_depth: int = 50) -> RenderSession:
        return cls(options=options, ancestry=[uri], max_depth=max_depth)

    @property
    def uri(self) -> str:
        return self.ancestry[-1]

    @property
    def is_descendant(self) -> bool:
        return self.depth > 0

    @property
    def assets(self) -> HeadAssets | None:
        return self._state.assets

    def attach_document(self, assets: HeadAssets) -> None:
        """Make ``assets`` the root head every frame lifts content into."""
        self._state.assets = assets

    def check_import(self, uri: str) -> None:
        """Reject an import of ``uri`` from this frame.

        Raises:
            CyclicImportError: If ``uri`` is already being rendered above this frame
            ImportDepthError: If the import would exceed ``max_depth``
        """
        if uri in self.ancestry:
            raise CyclicImportError(uri, self.ancestry)
        if self.depth >= self.max_depth:
            raise ImportDepthError(uri, self.max_depth, self.ancestry)

    def child_session(self, uri: str) -> RenderSession:
        """Create the frame for an import of ``uri`` from this frame.

        Shares options and document-wide state; ancestry and depth grow by one.
        """
        self.check_import(uri)
        return RenderSession(
            options=self.options,
            ancestry=[*self.ancestry, uri],
            depth=self.depth + 1,
            max_depth=self.max_depth,
            _state=self._state,
        )

    def lift(self, fragments: Iterable[str]) -> None:
        """Add head elements to the root document and record them."""
        fragments = list(fragments)
        if not fragments:
            return
        if self._state.assets is not None:
            self._state.assets.lift(fragments)
        self.lifted.extend(fragments)

    def record(self, fragments: Iterable[str]) -> None:
        """Record head elements a child frame already lifted."""
        self.lifted.extend(fragments)

    def register_script(self, script_id: str, registration: str) -> None:
        """Lift an enhancement-script registration once per document.

        The registration is recorded on this frame either way so a cache hit
        can replay it into another document.
        """
        if self.assets is not None and self.assets.has_script(script_id):
            self.record([registration])
        else:
            self.lift([registration])
