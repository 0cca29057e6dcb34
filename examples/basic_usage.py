"""Append a few events, read them back and follow the boundary for a while.

    python examples/basic_usage.py --server localhost:5005 --boundary orders

Connection settings can also come from ORISUN_* environment variables
(see ``ClientSettings``); command line flags win.
"""
from __future__ import annotations

import argparse
import json
import threading
import uuid

from orisun_client import (
    ClientSettings,
    ConnectionConfig,
    OptimisticConcurrencyError,
    OrisunClient,
    OrisunError,
    callbacks,
    eventstore,
)
from orisun_client.core.config import parse_server_address


def main() -> int:
    parser = argparse.ArgumentParser(description="Orisun client demo")
    parser.add_argument("--server", action="append", help="host:port, repeatable")
    parser.add_argument("--boundary", default="orders")
    parser.add_argument("--username", default=None)
    parser.add_argument("--password", default=None)
    parser.add_argument("--follow-seconds", type=float, default=3.0)
    args = parser.parse_args()

    settings = ClientSettings()
    if args.server:
        config = ConnectionConfig(servers=[parse_server_address(s) for s in args.server])
    else:
        config = settings.to_connection_config()

    with OrisunClient(
        config,
        username=args.username or settings.username,
        password=args.password or settings.password,
        enable_logging=True,
    ) as client:
        client.health_check(args.boundary)

        request = eventstore.SaveEventsRequest(
            boundary=args.boundary,
            events=[
                eventstore.EventToSave(
                    event_id=str(uuid.uuid4()),
                    event_type="OrderPlaced",
                    data=json.dumps({"order": i}),
                    metadata=json.dumps({"source": "basic_usage"}),
                )
                for i in range(3)
            ],
        )
        try:
            result = client.save_events(request)
            print(f"saved at {result.log_position.commit_position}:{result.log_position.prepare_position}")
        except OptimisticConcurrencyError as exc:
            print(f"conflict: expected {exc.expected_version}, actual {exc.actual_version}")
            return 1

        response = client.get_events(eventstore.GetEventsRequest(boundary=args.boundary, count=10))
        for event in response.events:
            print(event.event_type, event.data)

        done = threading.Event()
        subscription = client.subscribe_to_events(
            eventstore.CatchUpSubscribeToEventStoreRequest(boundary=args.boundary, subscriber_name="basic-usage"),
            callbacks(
                on_event=lambda e: print("live:", e.event_type, e.data),
                on_error=lambda err: (print("subscription failed:", err), done.set()),
                on_completed=done.set,
            ),
        )
        with subscription:
            done.wait(args.follow_seconds)
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except OrisunError as exc:
        print(f"error: {exc}")
        raise SystemExit(2)
