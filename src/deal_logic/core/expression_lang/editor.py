"""
Stateful formula editing session.

``ExpressionEditor`` holds one buffer and caret for a host widget and
turns key events into calls to the pure buffer and completion functions.
The canonical string (``value``) is the only thing the host should store.
"""

from __future__ import annotations

from deal_logic.core.config import Settings
from deal_logic.core.expression_lang import buffer as buf
from deal_logic.core.expression_lang.completion import (
    DEFAULT_MAX_RESULTS,
    FunctionMenu,
    MentionMenu,
    Overlay,
    resolve_overlay,
    select_function,
    select_mention,
)
from deal_logic.core.expression_lang.validator import ValidationResult, validate
from deal_logic.core.ir.fields import FieldCatalog
from deal_logic.core.ir.segments import Buffer, Caret


class ExpressionEditor:
    """One formula field being edited."""

    def __init__(
        self,
        value: str = "",
        catalog: FieldCatalog | None = None,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> None:
        self.catalog = catalog or FieldCatalog()
        self.max_results = max_results
        self.segments: Buffer = buf.parse(value)
        self.caret: Caret = buf.home_caret(self.segments)
        self.highlighted = 0
        self._dismissed = False

    @classmethod
    def from_settings(
        cls, settings: Settings, value: str = "", catalog: FieldCatalog | None = None
    ) -> ExpressionEditor:
        """Editor whose mention menu is capped by ``[expressions] max_mention_results``."""
        return cls(value, catalog, max_results=settings.expressions.max_mention_results)

    # -- State --

    @property
    def value(self) -> str:
        return buf.serialize(self.segments)

    @property
    def validation(self) -> ValidationResult:
        # validate() is memoised per string, so this always matches the current value
        return validate(self.value)

    @property
    def overlay(self) -> Overlay | None:
        if self._dismissed:
            return None
        return resolve_overlay(self.segments, self.caret, self.catalog, self.max_results)

    def label_for(self, field_id: str) -> str:
        return self.catalog.label_for(field_id)

    def reset(self, value: str) -> None:
        """Load an externally changed value, unless it is what we already hold."""
        if value != self.value:
            self._apply(buf.parse(value), None)

    def _apply(self, segments: Buffer, caret: Caret | None) -> None:
        self.segments = segments
        self.caret = buf.clamp_caret(segments, caret) if caret else buf.home_caret(segments)
        self.highlighted = 0
        self._dismissed = False

    # -- Editing --

    def type_text(self, text: str) -> None:
        self._apply(*buf.insert_text(self.segments, self.caret, text))

    def set_text(self, text: str, offset: int | None = None) -> None:
        """Replace the active text segment, as a plain text input would."""
        caret = buf.clamp_caret(self.segments, self.caret)
        segments = buf.set_text(self.segments, caret.segment, text)
        self._apply(segments, Caret(segment=caret.segment, offset=len(text) if offset is None else offset))

    def backspace(self) -> None:
        self._apply(*buf.backspace(self.segments, self.caret))

    def remove_reference(self, index: int) -> None:
        self._apply(*buf.remove_reference(self.segments, index))

    def move_left(self) -> None:
        self.caret = buf.move_left(self.segments, self.caret)
        self._dismissed = False

    def move_right(self) -> None:
        self.caret = buf.move_right(self.segments, self.caret)
        self._dismissed = False

    # -- Menus --

    def select_mention(self, field_id: str) -> None:
        self._apply(*select_mention(self.segments, self.caret, field_id))

    def select_function(self, name: str) -> None:
        self._apply(*select_function(self.segments, self.caret, name))

    def highlight_next(self) -> None:
        count = self._candidate_count()
        if count:
            self.highlighted = self.highlighted + 1 if self.highlighted < count - 1 else 0

    def highlight_previous(self) -> None:
        count = self._candidate_count()
        if count:
            self.highlighted = self.highlighted - 1 if self.highlighted > 0 else count - 1

    def accept(self) -> bool:
        """Pick the highlighted menu entry (Enter/Tab). False when no menu is open."""
        overlay = self.overlay
        if isinstance(overlay, MentionMenu) and overlay.candidates:
            self.select_mention(overlay.candidates[self._clamped_highlight(overlay)].id)
            return True
        if isinstance(overlay, FunctionMenu) and overlay.candidates:
            self.select_function(overlay.candidates[self._clamped_highlight(overlay)].name)
            return True
        return False

    def dismiss(self) -> None:
        """Hide the overlay until the next edit or caret move (Escape)."""
        self._dismissed = True

    def _candidate_count(self) -> int:
        overlay = self.overlay
        if isinstance(overlay, (MentionMenu, FunctionMenu)):
            return len(overlay.candidates)
        return 0

    def _clamped_highlight(self, overlay: MentionMenu | FunctionMenu) -> int:
        return min(self.highlighted, len(overlay.candidates) - 1)
