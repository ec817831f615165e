"""Status panel for refreshes and meeting actions.

One ``st.status`` block per action: every message is appended as a log line
inside the panel, a bar tracks ``current / total`` when the caller knows the
total, and the panel label ends as complete or error.
"""

from __future__ import annotations

import streamlit as st


class ProgressReporter:
    def __init__(self, title: str):
        self._panel = st.status(title, expanded=True)
        self._bar = None
        self._done = False

    # ReportService progress hook
    def callback(self, message: str, current: int | None = None, total: int | None = None) -> None:
        self.update(message, current=current, total=total)

    # meeting workflow on_log hook
    def log(self, message: str) -> None:
        self.update(message)

    def update(self, message: str, *, current: int | None = None, total: int | None = None) -> None:
        if self._done:
            return
        self._panel.write(message)
        if total and current is not None:
            if self._bar is None:
                self._bar = self._panel.progress(0.0)
            self._bar.progress(min(max(current / total, 0.0), 1.0))

    def complete(self, message: str) -> None:
        self._finish(message, "complete")

    def error(self, message: str) -> None:
        self._finish(message, "error")

    def _finish(self, message: str, state: str) -> None:
        if self._done:
            return
        self._done = True
        if self._bar is not None:
            self._bar.progress(1.0 if state == "complete" else 0.0)
        self._panel.update(label=message, state=state, expanded=state == "error")
