from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QComboBox,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from typemind.core.history import SessionStore
from typemind.core.prompts import Prompt, PromptRepository
from typemind.core.scorer import SessionSummary
from typemind.core.session import TypingTest
from typemind.ui.colors import HomeColors, accuracy_color
from typemind.ui.typing_widgets import ReferenceTextLabel, StatCard

logger = logging.getLogger(__name__)

_METRIC_LABELS = (
    ("impulsivity_score", "Impulsivity"),
    ("deliberation_score", "Deliberation"),
    ("cognitive_load_score", "Cognitive load"),
    ("resilience_score", "Resilience"),
    ("anxiety_score", "Anxiety"),
)


class MainWindow(QMainWindow):
    """Single-screen typing test.

    Shows the prompt with live highlighting, the countdown and live stats while
    a test runs, and the psychological metrics of the last finished test.
    """

    def __init__(self, prompts: PromptRepository, store: SessionStore, identity: str) -> None:
        super().__init__()
        self._prompts = prompts
        self._store = store
        self._identity = identity
        self._test: Optional[TypingTest] = None

        self._prompt_combo: Optional[QComboBox] = None
        self._reference_label: Optional[ReferenceTextLabel] = None
        self._input_box: Optional[QPlainTextEdit] = None
        self._start_button: Optional[QPushButton] = None
        self._stop_button: Optional[QPushButton] = None
        self._time_card: Optional[StatCard] = None
        self._wpm_card: Optional[StatCard] = None
        self._accuracy_card: Optional[StatCard] = None
        self._errors_card: Optional[StatCard] = None
        self._metric_values: dict[str, QLabel] = {}
        self._error_words_label: Optional[QLabel] = None

        self._countdown = QTimer(self)
        self._countdown.setInterval(1000)
        self._countdown.timeout.connect(self._on_tick)

        self._build_ui()
        self._select_prompt(self._prompts.default())

    def _build_ui(self) -> None:
        self.setWindowTitle("Typemind")
        root = QWidget()
        root.setStyleSheet(
            f"background: qlineargradient(x1:0, y1:0, x2:0, y2:1,"
            f" stop:0 {HomeColors.BG_TOP}, stop:1 {HomeColors.BG_BOTTOM});"
        )
        layout = QVBoxLayout(root)
        layout.setContentsMargins(32, 24, 32, 24)
        layout.setSpacing(16)

        header = QHBoxLayout()
        title = QLabel("Typemind")
        title.setStyleSheet(f"color: {HomeColors.PRIMARY_DARK}; font-size: 28px; font-weight: 800;")
        header.addWidget(title)
        header.addStretch(1)
        self._prompt_combo = QComboBox()
        for prompt in self._prompts.all():
            self._prompt_combo.addItem(f"{prompt.title} ({prompt.duration}s)", prompt.key)
        self._prompt_combo.currentIndexChanged.connect(self._on_prompt_changed)
        header.addWidget(self._prompt_combo)
        layout.addLayout(header)

        stats = QHBoxLayout()
        self._time_card = StatCard("Time")
        self._wpm_card = StatCard("WPM")
        self._accuracy_card = StatCard("Accuracy")
        self._errors_card = StatCard("Errors")
        for card in (self._time_card, self._wpm_card, self._accuracy_card, self._errors_card):
            stats.addWidget(card)
        layout.addLayout(stats)

        self._reference_label = ReferenceTextLabel()
        layout.addWidget(self._reference_label)

        self._input_box = QPlainTextEdit()
        self._input_box.setPlaceholderText("Click Start to begin the test")
        self._input_box.setEnabled(False)
        self._input_box.setStyleSheet("background: white; border-radius: 8px; padding: 8px; font-size: 18px;")
        self._input_box.textChanged.connect(self._on_text_changed)
        layout.addWidget(self._input_box)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        self._start_button = QPushButton("Start Test")
        self._start_button.clicked.connect(self._start_test)
        self._stop_button = QPushButton("Stop")
        self._stop_button.setEnabled(False)
        self._stop_button.clicked.connect(self._stop_test)
        for button in (self._start_button, self._stop_button):
            button.setStyleSheet(
                f"QPushButton {{ background: {HomeColors.PRIMARY}; color: white; padding: 10px 28px;"
                f" border-radius: 8px; font-weight: 700; }}"
                f"QPushButton:disabled {{ background: {HomeColors.TEXT_MUTED}; }}"
            )
            buttons.addWidget(button)
        buttons.addStretch(1)
        layout.addLayout(buttons)

        results = QGridLayout()
        results_title = QLabel("Last session")
        results_title.setStyleSheet(f"color: {HomeColors.TEXT_SECONDARY}; font-size: 16px; font-weight: 700;")
        results.addWidget(results_title, 0, 0, 1, 2)
        for row, (attr, caption) in enumerate(_METRIC_LABELS, start=1):
            name = QLabel(caption)
            name.setStyleSheet(f"color: {HomeColors.TEXT_SECONDARY};")
            value = QLabel("-")
            value.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
            results.addWidget(name, row, 0)
            results.addWidget(value, row, 1)
            self._metric_values[attr] = value
        self._error_words_label = QLabel("")
        self._error_words_label.setWordWrap(True)
        self._error_words_label.setStyleSheet(f"color: {HomeColors.TEXT_MUTED};")
        results.addWidget(self._error_words_label, len(_METRIC_LABELS) + 1, 0, 1, 2)
        layout.addLayout(results)
        layout.addStretch(1)

        self.setCentralWidget(root)

    def _select_prompt(self, prompt: Prompt) -> None:
        self._test = TypingTest(prompt, store=self._store, identity=self._identity)
        self._reference_label.set_reference(prompt.text)
        self._refresh_stats()

    def _on_prompt_changed(self, index: int) -> None:
        if self._test is not None and self._test.is_running:
            return
        key = self._prompt_combo.itemData(index)
        if key:
            self._select_prompt(self._prompts.get(key))

    def _start_test(self) -> None:
        if self._test is None or self._test.is_running:
            return
        self._input_box.blockSignals(True)
        self._input_box.clear()
        self._input_box.blockSignals(False)
        self._test.start()
        self._input_box.setEnabled(True)
        self._input_box.setPlaceholderText("Start typing...")
        self._input_box.setFocus()
        self._start_button.setEnabled(False)
        self._stop_button.setEnabled(True)
        self._prompt_combo.setEnabled(False)
        self._reference_label.show_input("")
        self._countdown.start()
        self._refresh_stats()

    def _stop_test(self) -> None:
        if self._test is None or not self._test.is_running:
            return
        self._show_summary(self._test.finish())

    def _on_tick(self) -> None:
        if self._test is None:
            return
        summary = self._test.tick()
        if summary is not None:
            self._show_summary(summary)
        else:
            self._refresh_stats()

    def _on_text_changed(self) -> None:
        if self._test is None or not self._test.is_running:
            return
        typed = self._input_box.toPlainText()
        self._test.type(typed)
        self._reference_label.show_input(typed)
        self._refresh_stats()

    def _refresh_stats(self) -> None:
        if self._test is None:
            return
        m, s = divmod(self._test.remaining, 60)
        self._time_card.set_value(f"{m}:{s:02d}")
        self._wpm_card.set_value(f"{self._test.wpm}")
        self._accuracy_card.set_value(f"{self._test.accuracy}%", accuracy_color(self._test.accuracy))
        self._errors_card.set_value(f"{self._test.errors}")

    def _show_summary(self, summary: Optional[SessionSummary]) -> None:
        self._countdown.stop()
        self._input_box.setEnabled(False)
        self._input_box.setPlaceholderText("Click Start to begin the test")
        self._start_button.setEnabled(True)
        self._stop_button.setEnabled(False)
        self._prompt_combo.setEnabled(True)
        self._refresh_stats()
        if summary is None:
            return
        metrics = summary.psychological_metrics
        for attr, label in self._metric_values.items():
            label.setText(f"{getattr(metrics, attr):.2f}")
        worst = sorted(summary.error_words, key=lambda e: e.count, reverse=True)[:5]
        words = ", ".join(f"{e.word or '(blank)'} ×{e.count}" for e in worst)
        self._error_words_label.setText(f"Most missed: {words}" if words else "No mistyped words")

    def closeEvent(self, event: QCloseEvent) -> None:
        """Score and save a running test before the window closes."""
        if self._test is not None and self._test.is_running:
            logger.info("Window closing with a running test; finishing it")
            self._test.finish()
        super().closeEvent(event)
