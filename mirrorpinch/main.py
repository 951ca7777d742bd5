from __future__ import annotations

import argparse

from mirrorpinch.core.config import PRESETS, PresetName


def main(argv=None):
    parser = argparse.ArgumentParser(prog="mirrorpinch", description="Pinch-to-drag widgets on the smart mirror.")
    sub = parser.add_subparsers(dest="cmd")

    cam = sub.add_parser("webcam", help="camera runtime with render window (default)")
    cam.add_argument("--preset", choices=[p.value for p in PresetName], default=PresetName.DEFAULT.value)
    cam.add_argument("--feel-log", action="store_true", help="write a per-frame JSONL log")

    sub.add_parser("fake", help="runtime loop driven by a scripted fake hand")
    sub.add_parser("daemon", help="hotkeys + tray to toggle hand control")

    args = parser.parse_args(argv)

    # imports are deferred so each mode only loads its own backends
    if args.cmd == "fake":
        from mirrorpinch.runtime.run_loop import run
        run()
    elif args.cmd == "daemon":
        from mirrorpinch.control_daemon import main as daemon_main
        daemon_main()
    else:
        from mirrorpinch.runtime.run_webcam import main as webcam_main
        preset = PRESETS[PresetName(getattr(args, "preset", PresetName.DEFAULT.value))]
        webcam_main(preset=preset, feel_log=getattr(args, "feel_log", False))


if __name__ == "__main__":
    main()
