import logging

from PySide6.QtCore import QObject, Signal
from PySide6.QtWidgets import QComboBox, QMainWindow, QTabWidget

from renderer.core.persistence import LocalImageCache, create_store
from ui.editor_tab import EditorTab
from ui.error_window import ErrorLogWidget
from ui.locales import available_languages, ensure_language, get_section
from ui.upload_tab import UploadTab

logger = logging.getLogger(__name__)

TAB_UPLOAD = "upload"
TAB_EDIT = "edit"

_LOG_LEVELS = {"error": logging.ERROR, "warning": logging.WARNING, "info": logging.INFO}


class ErrorNotifier(QObject):
    errorOccurred = Signal(str, str, str)

    def emit_error(self, title: str, message: str, level: str = "error"):
        logger.log(_LOG_LEVELS.get(level, logging.ERROR), "%s: %s", title, message)
        self.errorOccurred.emit(title, message, level)


class MainWindow(QMainWindow):
    def __init__(self, settings, initial_tab: str = TAB_UPLOAD, template_id: str | None = None):
        super().__init__()

        self.settings = settings
        self.language = ensure_language(settings.language)
        self.error_notifier = ErrorNotifier()

        self.cache = LocalImageCache(settings.cache_path)
        self.store = create_store(settings, self.cache)
        logger.info("Using %s", type(self.store).__name__)

        self.setMinimumSize(800, 600)

        self.tabs = QTabWidget()
        self.setCentralWidget(self.tabs)

        self.cmb_language = QComboBox()
        for code, name in available_languages().items():
            self.cmb_language.addItem(name, code)
        self.cmb_language.setCurrentIndex(max(0, self.cmb_language.findData(self.language)))
        self.cmb_language.currentIndexChanged.connect(
            lambda idx: self.set_language(self.cmb_language.itemData(idx))
        )
        self.tabs.setCornerWidget(self.cmb_language)

        self.upload_tab = UploadTab(
            self.store, self.cache, error_notifier=self.error_notifier, language=self.language
        )
        self.editor_tab = EditorTab(settings, self.store, self.cache, error_notifier=self.error_notifier)
        self.error_log_tab = ErrorLogWidget()
        self.error_notifier.errorOccurred.connect(self.error_log_tab.add_entry)

        self.upload_tab.templateUploaded.connect(self.on_template_uploaded)
        self.editor_tab.goToUpload.connect(self.show_upload)

        self.tabs.addTab(self.upload_tab, "")
        self.tabs.addTab(self.editor_tab, "")
        self.tabs.addTab(self.error_log_tab, "")

        self.set_language(self.language)

        if initial_tab == TAB_EDIT:
            self.tabs.setCurrentWidget(self.editor_tab)
            self.editor_tab.open_template(template_id)

    # ───────────────────────────────────────────────
    def on_template_uploaded(self, template_id: str):
        self.tabs.setCurrentWidget(self.editor_tab)
        self.editor_tab.open_template(template_id)

    def show_upload(self):
        self.tabs.setCurrentWidget(self.upload_tab)

    def set_language(self, language: str):
        language = ensure_language(language)
        self.language = language
        app_strings = get_section(language, "app")
        tabs_strings = get_section(language, "tabs")
        error_strings = get_section(language, "error_log")

        title = app_strings.get("window_title")
        if not title:
            name = app_strings.get("name", "Birthday Template Creator")
            version = app_strings.get("version", "")
            title = f"{name} {version}".strip()

        self.setWindowTitle(title)
        self.tabs.setTabText(0, tabs_strings.get("upload", "Upload Template"))
        self.tabs.setTabText(1, tabs_strings.get("edit", "Edit Template"))
        self.tabs.setTabText(2, error_strings.get("tab_title", "Errors"))
        self.upload_tab.set_language(language)
        self.editor_tab.set_language(language)
        self.error_log_tab.set_language(language)

    def closeEvent(self, event):
        self.upload_tab.shutdown()
        self.editor_tab.shutdown()
        super().closeEvent(event)
