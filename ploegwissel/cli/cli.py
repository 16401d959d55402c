from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from ploegwissel import config as ploegwissel_config
from ploegwissel.core.document import SECTION_TYPES, TriState
from ploegwissel.core.errors import ChecklistError, InvalidValue
from ploegwissel.core.fields import Field, FieldKind, MapField
from ploegwissel.core.mutation import get_value, resolve
from ploegwissel.core.persistence import PersistenceGateway
from ploegwissel.core.session import ChecklistSession
from ploegwissel.core.store import SqliteKeyValueStore
from ploegwissel.modules import scoring
from ploegwissel.tools.pathutil import ensure_dir, sanitize_filename
from ploegwissel.tools.report_sink import BrowserReportSink


logger = logging.getLogger(__name__)

YES_WORDS = {"ja", "j", "yes", "y", "true", "1"}
NO_WORDS = {"nee", "n", "no", "false", "0"}
OPEN_WORDS = {"-", "", "null", "none", "?"}


def _session(args: argparse.Namespace) -> ChecklistSession:
    settings = args.settings
    store = SqliteKeyValueStore(path=ploegwissel_config.resolve_path(settings, "store", "path"))
    gateway = PersistenceGateway(store, debounce=settings["autosave"]["debounceMs"] / 1000.0)
    sink = BrowserReportSink(
        reports_dir=ploegwissel_config.resolve_path(settings, "reports", "dir"),
        open_browser=bool(settings["reports"]["openBrowser"]) and not getattr(args, "no_open", False),
    )
    return ChecklistSession(gateway, sink=sink, default_company_name=settings["company"]["defaultName"]).start()


def _print(data: Any, as_json: bool) -> None:  # noqa: ANN401
    if as_json:
        print(json.dumps(data, ensure_ascii=False))
    else:
        if isinstance(data, str):
            print(data)
        else:
            print(json.dumps(data, ensure_ascii=False, indent=2))


def parse_answer(text: str, allow_open: bool) -> bool | None:
    word = text.strip().lower()
    if word in YES_WORDS:
        return True
    if word in NO_WORDS:
        return False
    if allow_open and word in OPEN_WORDS:
        return None
    expected = "ja, nee of -" if allow_open else "ja of nee"
    raise ValueError(f"verwacht {expected}")


def parse_value(path: str, text: str) -> Any:  # noqa: ANN401
    target, key = resolve(path)
    try:
        if key is not None or target.kind is FieldKind.BOOL:
            return parse_answer(text, allow_open=False)
        if target.kind is FieldKind.TRI:
            return TriState.coerce(parse_answer(text, allow_open=True))
    except ValueError as exc:
        raise InvalidValue(path, text, str(exc)) from exc
    return text


def _display(value: Any) -> str:  # noqa: ANN401
    if isinstance(value, TriState):
        return {TriState.YES: "Ja", TriState.NO: "Nee"}.get(value, "-")
    if isinstance(value, bool):
        return "Ja" if value else "Nee"
    return value or "-"


def format_document(session: ChecklistSession) -> str:
    doc = session.document
    completion = session.completion
    lines = [
        f"# {session.company_name}",
        f"{doc.meta.date} {doc.meta.time} | Ploeg: {doc.meta.shift} | {completion.pct}% compleet ({completion.done}/{completion.total})",
    ]
    for section in SECTION_TYPES:
        lines.append("")
        lines.append(f"## {section}")
        for map_field in MapField:
            if map_field.section == section:
                for key, checked in map_field.get(doc).items():
                    lines.append(f"[{'x' if checked else ' '}] {map_field.path}.{key}")
        for field in Field:
            if field.section == section:
                lines.append(f"{field.path}: {_display(get_value(doc, field))}")
    return "\n".join(lines)


def cmd_new(args: argparse.Namespace) -> None:
    session = _session(args)
    doc = session.reset()
    session.flush()
    _print({"status": "new", "date": doc.meta.date, "time": doc.meta.time}, args.json)


def cmd_show(args: argparse.Namespace) -> None:
    session = _session(args)
    if args.json:
        _print({"companyName": session.company_name, "data": session.document.to_dict(), "completion": session.completion.to_dict()}, True)
        return
    print(format_document(session))


def cmd_set(args: argparse.Namespace) -> None:
    session = _session(args)
    session.update(args.path, parse_value(args.path, args.value))
    session.flush()
    _print({"path": args.path, "value": _display(get_value(session.document, args.path)), "pct": session.completion.pct}, args.json)


def cmd_toggle(args: argparse.Namespace) -> None:
    session = _session(args)
    session.toggle(args.path, args.key)
    session.flush()
    checked = get_value(session.document, [*args.path.split("."), args.key])
    _print({"path": args.path, "key": args.key, "checked": checked, "pct": session.completion.pct}, args.json)


def cmd_status(args: argparse.Namespace) -> None:
    session = _session(args)
    completion = session.completion
    open_items = scoring.open_items(session.document)
    if args.json:
        _print({**completion.to_dict(), "open": open_items}, True)
        return
    print(f"{completion.done} / {completion.total} items bevestigd • {completion.pct}%")
    for name in open_items:
        print(f"- {name}")


def cmd_company(args: argparse.Namespace) -> None:
    session = _session(args)
    if args.name is not None:
        session.set_company_name(args.name)
        session.flush()
    _print({"companyName": session.company_name}, args.json)


def cmd_logo(args: argparse.Namespace) -> None:
    session = _session(args)
    encoded = session.upload_logo_file(Path(args.file))
    _print({"status": "saved", "bytes": len(encoded)}, args.json)


def cmd_export(args: argparse.Namespace) -> None:
    session = _session(args)
    data, filename = session.export()
    outdir = ensure_dir(Path(args.output).resolve() if args.output else Path.cwd())
    path = outdir / sanitize_filename(filename)
    path.write_bytes(data)
    _print({"status": "exported", "path": str(path)}, args.json)


def cmd_print(args: argparse.Namespace) -> None:
    session = _session(args)
    path = session.print_report()
    _print({"status": "printed", "path": str(path)}, args.json)


def cmd_clear(args: argparse.Namespace) -> None:
    if not args.yes:
        answer = input("Alles wissen (ook opgeslagen data)? [j/N] ")
        if answer.strip().lower() not in YES_WORDS:
            _print({"status": "cancelled"}, args.json)
            return
    session = _session(args)
    session.hard_clear()
    _print({"status": "cleared"}, args.json)


def _json_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--json", action="store_true", default=argparse.SUPPRESS, help="Emit machine-readable JSON output")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ploegwissel", description="Ploegwissel checklist (melkpoederproductie)")
    parser.add_argument("--json", action="store_true", help="Emit machine-readable JSON output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    sub = parser.add_subparsers(dest="command")

    new = sub.add_parser("new", help="Start a new checklist stamped with the current date/time")
    _json_flag(new)
    new.set_defaults(func=cmd_new)

    show = sub.add_parser("show", help="Show the current checklist")
    _json_flag(show)
    show.set_defaults(func=cmd_show)

    setp = sub.add_parser("set", help="Set a field, e.g. meta.operator Jan or prod.stable ja")
    setp.add_argument("path", help="section.field or section.mapping.key")
    setp.add_argument("value")
    _json_flag(setp)
    setp.set_defaults(func=cmd_set)

    toggle = sub.add_parser("toggle", help="Toggle a check in tech.ok or plan.items")
    toggle.add_argument("path", choices=[m.path for m in MapField])
    toggle.add_argument("key")
    _json_flag(toggle)
    toggle.set_defaults(func=cmd_toggle)

    status = sub.add_parser("status", help="Show completion and open items")
    _json_flag(status)
    status.set_defaults(func=cmd_status)

    company = sub.add_parser("company", help="Show or set the company name")
    company.add_argument("name", nargs="?")
    _json_flag(company)
    company.set_defaults(func=cmd_company)

    logo = sub.add_parser("logo", help="Store a PNG/JPG/WEBP/SVG logo for the report")
    logo.add_argument("file")
    _json_flag(logo)
    logo.set_defaults(func=cmd_logo)

    export = sub.add_parser("export", help="Write ploegwissel_<date>_<shift>.json")
    export.add_argument("--output", help="Target directory (defaults to the working directory)")
    _json_flag(export)
    export.set_defaults(func=cmd_export)

    printp = sub.add_parser("print", help="Render the printable report and open it")
    printp.add_argument("--no-open", action="store_true", help="Only write the HTML file")
    _json_flag(printp)
    printp.set_defaults(func=cmd_print)

    clear = sub.add_parser("clear", help="Delete stored checklist, company name and logo")
    clear.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    _json_flag(clear)
    clear.set_defaults(func=cmd_clear)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "command", None):
        parser.print_help()
        return 0
    settings = ploegwissel_config.load_settings(Path.cwd())
    args.settings = settings
    level = logging.DEBUG if args.verbose else getattr(logging, str(settings["logging"]["level"]).upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    try:
        args.func(args)
    except (ChecklistError, OSError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        if args.json:
            _print({"error": str(exc), "type": exc.__class__.__name__}, True)
        else:
            print(f"Error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
