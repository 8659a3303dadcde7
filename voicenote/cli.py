from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from .app import VoiceNoteApp
from .commands import doctor as cmd_doctor
from .commands import files as cmd_files
from .config import Settings, find_config
from .daemon import VoiceNoteDaemon
from .errors import VoiceNoteError
from .logs import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="WhatsApp voice-note conversion")
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    parser.add_argument("--log-level", default="INFO", help="Python logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)
    convert_parser = subparsers.add_parser("convert", help="Convert a file to an Ogg/Opus voice note")
    convert_parser.add_argument("input", type=Path)
    convert_parser.add_argument("-o", "--output", type=Path, default=None)
    convert_parser.add_argument("--mime", default=None, help="Declared MIME type of the input")

    probe_parser = subparsers.add_parser("probe", help="Show codec/channels/sample rate/duration")
    probe_parser.add_argument("file", type=Path)
    probe_parser.add_argument("--json", action="store_true", help="Emit JSON")

    check_parser = subparsers.add_parser("check", help="Check whether a file can be sent as voice")
    check_parser.add_argument("file", type=Path)
    check_parser.add_argument("--json", action="store_true", help="Emit JSON")

    subparsers.add_parser("batch", help="Convert every file currently in the inbox")
    subparsers.add_parser("watch", help="Watch the inbox and convert new files")
    subparsers.add_parser("doctor", help="Check ffmpeg/ffprobe and directories")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    config_path = find_config(args.config)
    settings = Settings.load(config_path) if config_path else Settings()
    roots = [settings.temp.directory, settings.watch.inbox, settings.watch.outbox]
    problems = configure_logging(args.log_level, roots)

    try:
        match args.command:
            case "convert":
                app = VoiceNoteApp.create(settings)
                asyncio.run(
                    cmd_files.convert(app, args.input, output=args.output, mime_type=args.mime)
                )
            case "probe":
                app = VoiceNoteApp.create(settings)
                asyncio.run(cmd_files.probe(app, args.file, json_output=args.json))
            case "check":
                app = VoiceNoteApp.create(settings)
                if not asyncio.run(cmd_files.check(app, args.file, json_output=args.json)):
                    raise SystemExit(1)
            case "batch":
                daemon = VoiceNoteDaemon(settings)
                outcomes = asyncio.run(daemon.run_batch())
                failed = [o for o in outcomes if not o.ok]
                print(f"Converted {len(outcomes) - len(failed)} file(s), {len(failed)} failed")
                if failed:
                    raise SystemExit(1)
            case "watch":
                daemon = VoiceNoteDaemon(settings)
                try:
                    asyncio.run(daemon.run_daemon())
                except KeyboardInterrupt:
                    pass
            case "doctor":
                report = cmd_doctor.run(settings)
                for line in report.checks:
                    print(line)
                if not report.ok:
                    raise SystemExit(1)
            case _:
                parser.error("Unknown command")
    except (VoiceNoteError, OSError) as exc:
        logging.getLogger("voicenote").error("%s", exc)
        raise SystemExit(1) from exc
    finally:
        for line in problems.summary():
            print(line)


if __name__ == "__main__":  # pragma: no cover
    main()
