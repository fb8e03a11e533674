#!/usr/bin/env python3
"""Lighting device simulator.

Subscribes to ``<root>/+/lighting/set`` and bounces every valid lighting
payload back on ``<root>/<device>/lighting/status`` (retained), exactly as
a physical device acknowledges a command. With ``--heartbeat`` it also
publishes periodic telemetry on ``<root>/<device>/status`` so the UI
sees the simulated devices as online.

Broker settings come from the ``LUMEN_*`` environment variables.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
import time
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pylumen import ConnectionManager, LumenConfig, LumenConfigError  # noqa: E402
from pylumen.config import generate_client_id  # noqa: E402
from pylumen.echo import EchoResponder, make_status_report, status_message  # noqa: E402
from pylumen.topics import lighting_set_wildcard  # noqa: E402

_LOG = logging.getLogger("mqtt_bounce")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Echo lighting/set commands back as lighting/status.",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument(
        "--heartbeat",
        type=float,
        default=0.0,
        help="Publish status telemetry for every configured device each N seconds (0 = off).",
    )
    parser.add_argument(
        "--any-device",
        action="store_true",
        help="Echo commands for any device name, not only the configured ones.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


async def _run(args: argparse.Namespace, config: LumenConfig) -> EchoResponder:
    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, stop.set)

    responder = EchoResponder(config.root_topic, None if args.any_device else config.devices)
    connection = ConnectionManager(
        loop=loop,
        config=config,
        subscription=lighting_set_wildcard(config.root_topic),
    )

    def on_message(topic: str, payload: bytes) -> None:
        reply = responder.handle(topic, payload)
        if reply is not None:
            connection.publish(reply.topic, reply.payload, retain=reply.retain)

    connection.on_message = on_message
    connection.on_state_change = lambda state: print(f"[bounce] MQTT {state}")

    started_at = time.time()
    print(f"[bounce] Connecting to {config.broker_host}:{config.broker_port} as {config.client_id}")
    connection.start()
    try:
        while not stop.is_set():
            if args.duration > 0 and (time.time() - started_at) >= args.duration:
                print(f"[bounce] Reached --duration={args.duration}s, stopping.")
                break
            if args.heartbeat > 0 and connection.is_connected:
                report = make_status_report(started_at=started_at)
                for device in config.devices:
                    message = status_message(config.root_topic, device, report)
                    connection.publish(message.topic, message.payload, retain=message.retain)
            try:
                await asyncio.wait_for(stop.wait(), timeout=args.heartbeat if args.heartbeat > 0 else 1.0)
            except TimeoutError:
                pass
    finally:
        connection.stop()
    return responder


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = LumenConfig.from_env(client_id=f"lighting-bounce-{generate_client_id()}")
    except LumenConfigError as exc:
        print(f"[bounce] Invalid configuration: {exc}", file=sys.stderr)
        return 2

    responder = asyncio.run(_run(args, config))
    print("[bounce] Summary")
    print(f"[bounce]   echoed   : {responder.echoed}")
    print(f"[bounce]   rejected : {responder.rejected}")
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
