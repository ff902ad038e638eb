"""
Hueprint Palette Session
Stateful adapter between a presentation layer and the pure extraction core.

A session holds what a palette screen displays (current image name, palette,
grayscale flag, error message, last copied chip) and notifies subscribers on
every change. The last successful result is persisted through PaletteCache and
restored when a session is created.
"""
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional

from hueprint.errors import PaletteError
from hueprint.schemas import ExtractionOptions, ExtractionResult
from hueprint.services.cache import PaletteCache
from hueprint.services.colors.export import ExportArtifact, export_swatch, export_text
from hueprint.services.colors.extract_api import ImageUpload, handle_extract
from hueprint.utils.logging import get_logger

logger = get_logger()


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of what the palette screen shows."""
    image_name: Optional[str] = None
    palette: List[str] = field(default_factory=list)
    is_grayscale: bool = False
    timestamp: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    copied_index: Optional[int] = None

    @property
    def has_palette(self) -> bool:
        return bool(self.palette)


Listener = Callable[[SessionState], None]


class PaletteSession:
    """Observer-style state holder for one palette screen."""

    def __init__(self,
                 cache: Optional[PaletteCache] = None,
                 options: Optional[ExtractionOptions] = None):
        self.cache = cache
        self.options = options or ExtractionOptions()
        self._listeners: List[Listener] = []
        self._state = SessionState()

        if cache is not None:
            cached = cache.load()
            if cached is not None:
                self._state = self._state_from_result(cached)
                logger.info("Restored cached palette", extra={"image_name": cached.filename})

    @property
    def state(self) -> SessionState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    @staticmethod
    def _state_from_result(result: ExtractionResult) -> SessionState:
        return SessionState(
            image_name=result.filename,
            palette=list(result.palette),
            is_grayscale=result.is_grayscale,
            timestamp=result.timestamp,
        )

    def load(self, upload: ImageUpload) -> Optional[ExtractionResult]:
        """
        Extract a palette for a new image.

        Validation failures become the session error message; the previous
        palette is kept on screen in that case.

        Returns:
            The ExtractionResult, or None when the upload was rejected
        """
        self._set_state(replace(self._state, error=None, error_code=None, copied_index=None))

        try:
            result = handle_extract(upload, self.options, self.cache)
        except PaletteError as e:
            self._set_state(replace(self._state, error=e.message, error_code=e.code))
            return None

        self._set_state(self._state_from_result(result))
        return result

    def copy(self, index: int) -> str:
        """
        Mark a palette entry as copied and return its hex string.

        Raises:
            IndexError: if index is outside the palette
        """
        if not 0 <= index < len(self._state.palette):
            raise IndexError(f"No palette color at index {index}")
        color = self._state.palette[index]
        self._set_state(replace(self._state, copied_index=index))
        return color

    def clear_copied(self) -> None:
        """Drop the copied marker (the UI calls this after its feedback delay)."""
        if self._state.copied_index is not None:
            self._set_state(replace(self._state, copied_index=None))

    def reset(self) -> None:
        """Forget the current image and palette; the persisted result is kept."""
        self._set_state(SessionState())

    def forget(self) -> bool:
        """Reset and also remove the persisted result."""
        self.reset()
        if self.cache is None:
            return True
        return self.cache.clear()

    def download(self, filename: Optional[str] = None) -> ExportArtifact:
        """
        Raises:
            ValueError: if there is no palette to export
        """
        if not self._state.palette:
            raise ValueError("No palette to export")
        return export_text(self._state.palette, filename)

    def download_swatch(self, filename: Optional[str] = None) -> ExportArtifact:
        if not self._state.palette:
            raise ValueError("No palette to export")
        return export_swatch(self._state.palette, filename, highlight_index=self._state.copied_index)
