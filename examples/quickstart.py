# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Rally WSAPI quickstart: create, read, update, query and delete a defect.

Reads ``RALLY_SERVER`` and ``RALLY_API_KEY`` from the environment (prompts for
the key when unset) and shows both the future and the callback styles.
"""

import logging
import os
import sys
import threading
from pathlib import Path

# Add src to PYTHONPATH for local runs
sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from Rally.Wsapi.client import RallyClient
from Rally.Wsapi.core.config import WsapiConfig
from Rally.Wsapi.core.errors import RequestError


def log_call(call: str) -> None:
    print({"call": call})


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    api_key = os.environ.get("RALLY_API_KEY") or input("Enter Rally API key: ").strip()
    if not api_key:
        print("No API key entered; exiting.")
        return 1

    config = WsapiConfig.from_env()
    with RallyClient(api_key=api_key, config=config) as client:
        try:
            log_call("client.create('defect', ...)")
            created = client.create("defect", {"Name": "Quickstart defect"}, fetch=["FormattedID", "Name"]).result()
            ref = created["Object"]["_ref"]
            print({"created": created["Object"].get("FormattedID"), "ref": ref})

            log_call("client.get(ref)")
            print(client.get(ref, fetch="Name,State").result().get("Name"))

            # Callback style: the same call delivers (errors, result)
            finished = threading.Event()

            def on_update(errors, result):
                print({"update_errors": errors, "warnings": result and result.get("Warnings")})
                finished.set()

            log_call("client.update(ref, {...}, callback=on_update)")
            client.update(ref, {"State": "Open"}, callback=on_update)
            finished.wait(30)

            log_call("client.query_dataframe('defect', ...)")
            df = client.query_dataframe(
                "defect", query='(Name contains "Quickstart")', fetch="FormattedID,Name,State", pagesize=10
            ).result()
            print(df.head())

            log_call("client.delete(ref)")
            client.delete(ref).result()
        except RequestError as e:
            print({"errors": e.errors, "code": e.code, "subcode": e.subcode})
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
