import argparse
import logging
import sys
from dataclasses import replace

from PySide6.QtWidgets import QApplication

from renderer.core.settings import load_settings
from ui.main_window import TAB_EDIT, TAB_UPLOAD, MainWindow

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO"):
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    # keep third-party chatter down
    for noisy in ("PIL", "urllib3", "psd_tools"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Birthday template editor")
    parser.add_argument("--tab", choices=[TAB_UPLOAD, TAB_EDIT], default=TAB_UPLOAD, help="Tab to open on start")
    parser.add_argument("--id", dest="template_id", default=None, help="Template id to open in the editor")
    parser.add_argument("--lang", default=None, help="UI language (en, uk)")
    parser.add_argument("--config", default=None, help="Path to editor.json")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    settings = load_settings(args.config)
    if args.lang:
        settings = replace(settings, language=args.lang)

    app = QApplication(sys.argv[:1])
    # a template id always opens the editor
    tab = TAB_EDIT if args.template_id else args.tab
    window = MainWindow(settings, initial_tab=tab, template_id=args.template_id)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
