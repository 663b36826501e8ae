import logging
import os

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QScrollArea,
    QSplitter,
    QStackedWidget,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from renderer.core.errors import SaveFailure
from renderer.core.exporter import download_png, encode_png, export_pdf
from renderer.core.fonts import FontResolver
from renderer.core.image_loader import DecodeGeneration, ImageLoader
from renderer.core.interaction import EditorController
from renderer.core.models import PANEL_CONTENT, PANEL_STYLE
from renderer.core.persistence import bundle_to_dict, resolve_template_image
from renderer.core.renderer import TemplateRenderer
from renderer.widgets.content_panel import ContentPanel
from renderer.widgets.property_panel import StylePanel
from renderer.widgets.template_canvas import TemplateCanvas
from ui.error_window import describe_error
from ui.locales import ensure_language, format_message, get_section
from ui.workers import TaskRunner

logger = logging.getLogger(__name__)

PANEL_TABS = [PANEL_CONTENT, PANEL_STYLE]


class EditorTab(QWidget):
    goToUpload = Signal()

    def __init__(self, settings, store, cache, parent=None, error_notifier=None):
        super().__init__(parent)
        self.settings = settings
        self.store = store
        self.cache = cache
        self.error_notifier = error_notifier
        self.language = ensure_language(settings.language)
        self.strings: dict = {}
        self.error_strings: dict = {}

        self.fonts = FontResolver(settings.fonts_dir)
        self.renderer = TemplateRenderer(self.fonts)
        self.loader = ImageLoader(settings.max_canvas_width, settings.viewport_margin, settings.request_timeout)
        self.generation = DecodeGeneration()
        self.controller = EditorController(
            self.fonts,
            error_notifier=error_notifier,
            touch_padding=settings.touch_padding,
        )
        self.tasks = TaskRunner(self)

        self.template_id: str | None = None
        self.source_image = None
        self.is_saving = False
        self.last_export_dir = ""

        self.build_ui()
        self.controller.subscribe(self._on_state_changed)
        self.set_language(self.language)
        self._show_empty()

    # ───────────────────────────────────────────────
    # UI
    # ───────────────────────────────────────────────
    def build_ui(self):
        layout = QVBoxLayout(self)
        self.stack = QStackedWidget()
        layout.addWidget(self.stack)

        # Empty state
        self.empty_page = QWidget()
        empty_layout = QVBoxLayout(self.empty_page)
        empty_layout.addStretch(1)
        self.lbl_empty = QLabel()
        self.lbl_empty.setAlignment(Qt.AlignCenter)
        empty_layout.addWidget(self.lbl_empty)
        self.lbl_empty_hint = QLabel()
        self.lbl_empty_hint.setAlignment(Qt.AlignCenter)
        self.lbl_empty_hint.setWordWrap(True)
        empty_layout.addWidget(self.lbl_empty_hint)
        self.btn_go_upload = QPushButton()
        self.btn_go_upload.clicked.connect(lambda: self.goToUpload.emit())
        empty_layout.addWidget(self.btn_go_upload, alignment=Qt.AlignCenter)
        empty_layout.addStretch(1)
        self.stack.addWidget(self.empty_page)

        # Loading state
        self.loading_page = QWidget()
        loading_layout = QVBoxLayout(self.loading_page)
        self.lbl_loading = QLabel()
        self.lbl_loading.setAlignment(Qt.AlignCenter)
        loading_layout.addWidget(self.lbl_loading)
        self.stack.addWidget(self.loading_page)

        # Editor
        self.editor_page = QWidget()
        editor_layout = QVBoxLayout(self.editor_page)

        toolbar = QHBoxLayout()
        toolbar.addStretch(1)
        self.btn_download = QPushButton()
        self.btn_download.clicked.connect(self.download_image)
        toolbar.addWidget(self.btn_download)
        self.btn_pdf = QPushButton()
        self.btn_pdf.clicked.connect(self.export_pdf_file)
        toolbar.addWidget(self.btn_pdf)
        self.btn_save = QPushButton()
        self.btn_save.clicked.connect(self.save_template)
        toolbar.addWidget(self.btn_save)
        editor_layout.addLayout(toolbar)

        splitter = QSplitter(Qt.Horizontal)

        self.canvas = TemplateCanvas(self.controller, self.renderer)
        self.scroll = QScrollArea()
        self.scroll.setAlignment(Qt.AlignCenter)
        self.scroll.setWidget(self.canvas)
        splitter.addWidget(self.scroll)

        self.panel_tabs = QTabWidget()
        self.content_panel = ContentPanel(self.controller)
        self.style_panel = StylePanel(self.controller)
        self.panel_tabs.addTab(self.content_panel, "")
        self.panel_tabs.addTab(self.style_panel, "")
        self.panel_tabs.currentChanged.connect(self._on_panel_tab_changed)
        splitter.addWidget(self.panel_tabs)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 1)

        editor_layout.addWidget(splitter)
        self.stack.addWidget(self.editor_page)

    def set_language(self, language: str):
        language = ensure_language(language)
        self.language = language
        self.strings = get_section(language, "editor_tab")
        self.error_strings = get_section(language, "errors")
        self.controller.strings = self.error_strings

        self.lbl_empty.setText(self.strings.get("no_image", "No template image found."))
        self.lbl_empty_hint.setText(self.strings.get("no_image_hint", ""))
        self.btn_go_upload.setText(self.strings.get("go_to_upload", "Go to Upload"))
        self.lbl_loading.setText(self.strings.get("loading", "Loading template..."))
        self.btn_download.setText(self.strings.get("download", "Download"))
        self.btn_pdf.setText(self.strings.get("export_pdf", "Export PDF"))
        self._update_save_button()
        self.panel_tabs.setTabText(0, self.strings.get("content_tab", "Content"))
        self.panel_tabs.setTabText(1, self.strings.get("style_tab", "Style"))

        self.content_panel.set_language(get_section(language, "content_panel"))
        self.style_panel.set_language(get_section(language, "style_panel"))

    def _show_empty(self):
        self.stack.setCurrentWidget(self.empty_page)

    def _update_save_button(self):
        key, default = ("saving", "Saving...") if self.is_saving else ("save", "Save Template")
        self.btn_save.setText(self.strings.get(key, default))
        self.btn_save.setEnabled(not self.is_saving)

    # ───────────────────────────────────────────────
    # Loading
    # ───────────────────────────────────────────────
    def open_template(self, template_id: str | None):
        self.template_id = template_id or None
        if not self.template_id:
            self.generation.invalidate()
            self._show_empty()
            return

        ticket = self.generation.begin()
        self.stack.setCurrentWidget(self.loading_page)
        logger.info("Opening template %s", self.template_id)
        self.tasks.start(
            self._load_background,
            self.template_id,
            self._viewport_width(),
            on_done=lambda result, t=ticket: self._background_loaded(t, result),
            on_fail=lambda exc, t=ticket: self._background_failed(t, exc),
        )

    def _viewport_width(self) -> int:
        width = self.scroll.viewport().width()
        if width <= self.settings.viewport_margin:
            # not laid out yet
            width = max(self.window().width(), self.settings.max_canvas_width + self.settings.viewport_margin)
        return width

    def _load_background(self, template_id: str, viewport_width: int):
        # runs on a worker thread
        source = resolve_template_image(template_id, self.cache, self.store)
        if not source:
            return None
        return self.loader.load_scaled(source, viewport_width)

    def _background_loaded(self, ticket: int, result):
        if not self.generation.is_current(ticket):
            logger.debug("Dropping stale template decode %s", ticket)
            return
        if result is None:
            logger.info("Template %s has no image", self.template_id)
            self.source_image = None
            self.canvas.set_background(None)
            self._show_empty()
            return

        self.source_image, background = result
        self.controller.load_template()
        self.canvas.set_background(background)
        self.stack.setCurrentWidget(self.editor_page)

    def _background_failed(self, ticket: int, exc: Exception):
        if not self.generation.is_current(ticket):
            return
        self.source_image = None
        self.canvas.set_background(None)
        self._show_empty()
        self._report(exc)

    # ───────────────────────────────────────────────
    # State
    # ───────────────────────────────────────────────
    def _on_state_changed(self, state):
        self.content_panel.sync_from_state(state)
        self.style_panel.sync_from_state(state)

        self.panel_tabs.blockSignals(True)
        self.panel_tabs.setTabEnabled(1, state.selected_id is not None)
        self.panel_tabs.setCurrentIndex(PANEL_TABS.index(state.panel))
        self.panel_tabs.blockSignals(False)

    def _on_panel_tab_changed(self, index: int):
        self.controller.set_panel(PANEL_TABS[index])

    # ───────────────────────────────────────────────
    # Download / export / save
    # ───────────────────────────────────────────────
    def download_image(self):
        if self.canvas.rendered is None:
            return
        folder = QFileDialog.getExistingDirectory(
            self, self.strings.get("select_folder", "Choose download folder"), self.last_export_dir
        )
        if not folder:
            return
        self.last_export_dir = folder
        try:
            path = download_png(self.canvas.rendered, folder, self.settings.export_filename)
        except OSError as exc:
            self._report(exc, fallback=SaveFailure)
            return
        self._emit_success(format_message(self.strings, "downloaded", path=path))

    def export_pdf_file(self):
        if self.canvas.rendered is None:
            return
        name = os.path.splitext(self.settings.export_filename)[0] + ".pdf"
        default = os.path.join(self.last_export_dir, name)
        path, _ = QFileDialog.getSaveFileName(
            self, self.strings.get("export_pdf", "Export PDF"), default, self.strings.get("pdf_filter", "PDF (*.pdf)")
        )
        if not path:
            return
        self.last_export_dir = os.path.dirname(path)
        try:
            export_pdf(self.canvas.rendered, path)
        except (OSError, ValueError) as exc:
            self._report(exc, fallback=SaveFailure)
            return
        self._emit_success(format_message(self.strings, "pdf_exported", path=path))

    def save_template(self):
        if not self.template_id or self.canvas.rendered is None or self.is_saving:
            return
        self.is_saving = True
        self._update_save_button()
        image_png = encode_png(self.canvas.rendered)
        bundle = bundle_to_dict(self.controller.state)
        self.tasks.start(
            self.store.save,
            self.template_id,
            bundle,
            image_png,
            on_done=self._saved,
            on_fail=self._save_failed,
        )

    def _saved(self, _result):
        self.is_saving = False
        self._update_save_button()
        self._emit_success(self.strings.get("saved", "Template saved successfully!"))

    def _save_failed(self, exc: Exception):
        self.is_saving = False
        self._update_save_button()
        self._report(exc, fallback=SaveFailure)

    # ───────────────────────────────────────────────
    def _emit_success(self, message: str):
        if self.error_notifier:
            self.error_notifier.emit_error(self.strings.get("success_title", "Success"), message, "info")

    def _report(self, exc: Exception, fallback=None):
        if fallback is None:
            title, message, level = describe_error(exc, self.error_strings)
        else:
            title, message, level = describe_error(exc, self.error_strings, fallback)
        if self.error_notifier:
            self.error_notifier.emit_error(title, message, level)

    def shutdown(self):
        self.generation.invalidate()
        self.tasks.wait_all()
