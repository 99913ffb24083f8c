"""
Local form-state persistence.

FormStore keeps the latest JSON snapshot of each form in a single file,
keyed by form identifier. DebouncedSaver coalesces rapid edits into at
most one write per debounce window.

Persistence is best effort: read and write failures are logged and the
caller carries on with default state.
"""

import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .norms import Norms, default_norms

logger = logging.getLogger(__name__)


class FormStore:
    """JSON key-value store for form snapshots."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Discarding unreadable form store {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Discarding form store {self.path}: not a JSON object")
            return {}
        return data

    def load(self, form_id: str) -> Optional[Dict[str, Any]]:
        """
        Latest saved snapshot for a form.

        Returns None when nothing usable is stored.
        """
        snapshot = self._read_all().get(form_id)
        if snapshot is None:
            return None
        if not isinstance(snapshot, dict):
            logger.warning(f"Ignoring malformed saved state for {form_id!r}")
            return None
        return snapshot

    def save(self, form_id: str, snapshot: Dict[str, Any]) -> bool:
        """Overwrite the snapshot of a form. Returns False on failure."""
        data = self._read_all()
        data[form_id] = snapshot
        try:
            payload = json.dumps(data, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as e:
            logger.warning(f"Could not serialize form data for {form_id!r}: {e}")
            return False

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(payload)
            tmp_path.replace(self.path)
        except OSError as e:
            logger.warning(f"Failed to save form data for {form_id!r}: {e}")
            return False

        logger.debug(f"Saved form data for {form_id!r}")
        return True

    def remove(self, form_id: str) -> bool:
        data = self._read_all()
        if form_id not in data:
            return False
        del data[form_id]
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.warning(f"Failed to remove form data for {form_id!r}: {e}")
            return False
        return True


class DebouncedSaver:
    """
    Coalesce snapshot writes for one form.

    The UI event loop calls notify() on every change and poll() on its
    idle ticks. Only the last snapshot of a burst is written, once the
    debounce window has elapsed since the last change. Snapshots
    notified before mark_loaded() belong to the initial load and are
    not written back.

    The debounce window defaults to the `persistence_debounce_s` norm.
    """

    def __init__(
        self,
        store: FormStore,
        form_id: str,
        delay: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        norms: Optional[Norms] = None,
    ):
        self.store = store
        self.form_id = form_id
        if delay is None:
            delay = (norms or default_norms()).persistence_debounce_s
        self.delay = delay
        self.clock = clock
        self.loaded = False
        self.writes = 0
        self._pending: Optional[Dict[str, Any]] = None
        self._deadline: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def load(self) -> Optional[Dict[str, Any]]:
        """Read the saved snapshot once at startup, then accept changes."""
        try:
            return self.store.load(self.form_id)
        finally:
            self.mark_loaded()

    def mark_loaded(self) -> None:
        self.loaded = True

    def notify(self, snapshot: Dict[str, Any]) -> None:
        """Record the latest snapshot and restart the debounce window."""
        if not self.loaded:
            return
        self._pending = snapshot
        self._deadline = self.clock() + self.delay

    def poll(self) -> bool:
        """Write the pending snapshot if its window has elapsed."""
        if self._pending is None or self.clock() < self._deadline:
            return False
        return self.flush()

    def flush(self) -> bool:
        """Write any pending snapshot now."""
        if self._pending is None:
            return False
        snapshot = self._pending
        self._pending = None
        self._deadline = None
        self.writes += 1
        return self.store.save(self.form_id, snapshot)
