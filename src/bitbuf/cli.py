from __future__ import annotations
import argparse, json, logging, sys
from pathlib import Path
from typing import Any, Dict

from .binary.errors import BitBufError
from .binary.record_codec import pack, unpack
from .config import load_config
from .models.layout import FieldKind, RecordLayout
from .utils.logging import setup_logging

log = logging.getLogger(__name__)


def _load_layout(path: str) -> RecordLayout:
    return RecordLayout.from_json(Path(path).read_bytes())


def _values_from_json(layout: RecordLayout, raw: Dict[str, Any]) -> Dict[str, Any]:
    # bytes travel as hex strings in JSON
    out = dict(raw)
    for f in layout.fields:
        if f.kind is FieldKind.BYTES and isinstance(out.get(f.name), str):
            out[f.name] = bytes.fromhex(out[f.name])
    return out


def _values_to_json(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: (v.hex() if isinstance(v, bytes) else v) for k, v in values.items()}


def cmd_info(args):
    layout = _load_layout(args.layout)
    print(f"{layout.name}: {len(layout.fields)} fields, {layout.fixed_bits()} fixed bits")
    for row in layout.describe():
        off = "-" if row["offset"] is None else row["offset"]
        bits = "var" if row["bits"] is None else row["bits"]
        print(f"  {row['name']:<24} {row['kind']:<7} bits={bits:<5} offset={off}")
    return 0


def cmd_pack(args):
    layout = _load_layout(args.layout)
    values = _values_from_json(layout, json.loads(Path(args.values).read_text(encoding="utf-8")))
    data = pack(layout, values, size=args.size)
    Path(args.output).write_bytes(data)
    log.info("packed %s into %d bytes -> %s", layout.name, len(data), args.output)
    return 0


def cmd_unpack(args):
    layout = _load_layout(args.layout)
    values = unpack(layout, Path(args.input).read_bytes())
    text = json.dumps(_values_to_json(values), indent=2)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        log.info("unpacked %s -> %s", layout.name, args.output)
    else:
        print(text)
    return 0


def cmd_plot(args):
    from .viz import plot_layout
    layout = _load_layout(args.layout)
    values = None
    if args.values:
        values = _values_from_json(layout, json.loads(Path(args.values).read_text(encoding="utf-8")))
    plot_layout(layout, values)
    return 0


def build_parser():
    p = argparse.ArgumentParser(prog="bitbuf", description="Bit-packed record utilities")
    p.add_argument("--config", default=None, help="YAML config file")
    p.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    p.add_argument("--log-json", action="store_true", default=None, help="Render log lines as JSON")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("info", help="print field widths and bit offsets of a layout")
    sp.add_argument("layout", help="Layout JSON file")
    sp.set_defaults(func=cmd_info)

    sp = sub.add_parser("pack", help="encode a JSON record into a binary file")
    sp.add_argument("layout")
    sp.add_argument("values", help="JSON object of field values (bytes as hex)")
    sp.add_argument("output")
    sp.add_argument("--size", type=int, default=None, help="Buffer size in bytes (default: exact fit)")
    sp.add_argument("--fixed-size", action="store_true", help="Use the configured default_capacity as buffer size")
    sp.set_defaults(func=cmd_pack)

    sp = sub.add_parser("unpack", help="decode a binary file into JSON")
    sp.add_argument("layout")
    sp.add_argument("input")
    sp.add_argument("--output", "-o", default=None, help="Write JSON here instead of stdout")
    sp.set_defaults(func=cmd_unpack)

    sp = sub.add_parser("plot", help="bit layout chart")
    sp.add_argument("layout")
    sp.add_argument("--values", default=None, help="JSON values used to size strings")
    sp.set_defaults(func=cmd_plot)

    return p


def main(argv=None):
    p = build_parser()
    ns = p.parse_args(argv)
    try:
        cfg = load_config(ns.config, {"log_level": ns.log_level, "log_json": ns.log_json})
        setup_logging(cfg.log_level, log_file=cfg.log_file, log_json=cfg.log_json)
        if ns.cmd == "pack" and ns.fixed_size and ns.size is None:
            ns.size = cfg.default_capacity
        return ns.func(ns)
    except (BitBufError, OSError, ValueError) as e:
        log.error("%s failed: %s", ns.cmd, e)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
