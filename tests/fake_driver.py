#!/usr/bin/env python3

"""
Minimal WebDriver remote end for WebDriverController testing

Started by the tests as a driver executable:

    python fake_driver.py --port=4444 [--delay=0.5] [--exit-code=3]

It speaks just enough of the HTTP protocol to create and delete sessions,
navigate, find an element and accept input actions.
"""

import argparse
import base64
import http.server
import json
import sys
import time
import uuid
from urllib.parse import urlparse

ELEMENT_KEY = "element-6066-11e4-a52e-4f735466cecf"

SCREENSHOT = b"\x89PNG\r\n\x1a\nfake"


class FakeDriverHandler(http.server.BaseHTTPRequestHandler):
    """Request handler for the fake remote end"""

    # session id -> state
    sessions = {}

    def log_message(self, format, *args):
        pass

    def _send(self, status, value, **extra):
        body = dict(extra)
        body["value"] = value
        data = json.dumps(body).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def _error(self, status, error, message):
        self._send(status, {"error": error, "message": message, "stacktrace": ""})

    def _body(self):
        length = int(self.headers.get("Content-Length", 0))
        if not length:
            return {}
        return json.loads(self.rfile.read(length).decode("utf-8"))

    def do_GET(self):
        self._route("GET")

    def do_POST(self):
        self._route("POST")

    def do_DELETE(self):
        self._route("DELETE")

    def _route(self, method):
        parts = [p for p in urlparse(self.path).path.split("/") if p]
        body = self._body() if method == "POST" else {}

        if parts == ["status"] and method == "GET":
            return self._send(200, {"ready": not self.sessions, "message": "fake driver"})

        if parts == ["session"] and method == "POST":
            return self._new_session(body)

        if len(parts) < 2 or parts[0] != "session":
            return self._error(404, "unknown command", "{} {}".format(method, self.path))

        session_id, rest = parts[1], parts[2:]
        state = self.sessions.get(session_id)
        if state is None:
            return self._error(404, "invalid session id", "No session {}".format(session_id))

        if rest == [] and method == "DELETE":
            del self.sessions[session_id]
            return self._send(200, None)

        if rest == ["url"] and method == "POST":
            state["url"] = body["url"]
            return self._send(200, None)
        if rest == ["url"] and method == "GET":
            return self._send(200, state["url"])
        if rest == ["title"] and method == "GET":
            return self._send(200, "Page at {}".format(state["url"]))
        if rest == ["source"] and method == "GET":
            return self._send(200, "<html><body>{}</body></html>".format(state["url"]))

        if rest == ["element"] and method == "POST":
            if body.get("value") == "#missing":
                return self._error(404, "no such element", "Unable to locate {}".format(body.get("value")))
            return self._send(200, {ELEMENT_KEY: "element-1"})
        if len(rest) == 3 and rest[0] == "element" and rest[2] == "text" and method == "GET":
            return self._send(200, "Text of {}".format(rest[1]))

        if rest == ["actions"] and method == "POST":
            state["actions"].append(body.get("actions"))
            return self._send(200, None)
        if rest == ["actions"] and method == "DELETE":
            return self._send(200, None)

        if rest == ["screenshot"] and method == "GET":
            return self._send(200, base64.b64encode(SCREENSHOT).decode("ascii"))

        return self._error(404, "unknown command", "{} {}".format(method, self.path))

    def _new_session(self, body):
        capabilities = body.get("capabilities", {})
        always_match = capabilities.get("alwaysMatch", {})
        first_match = capabilities.get("firstMatch", [{}])

        if always_match.get("browserName") == "unsupported":
            return self._error(500, "session not created", "No matching capabilities found")
        if self.sessions:
            return self._error(500, "session not created", "Maximum number of active sessions")

        matched = dict(always_match)
        matched.update(first_match[0] if first_match else {})
        session_id = uuid.uuid4().hex
        self.sessions[session_id] = {"url": "about:blank", "actions": [], "requested": body}
        return self._send(200, {"sessionId": session_id, "capabilities": matched})


def main():
    parser = argparse.ArgumentParser(description="Fake WebDriver remote end")
    parser.add_argument("--port", type=int, required=True)
    parser.add_argument("--delay", type=float, default=0, help="Seconds to wait before listening")
    parser.add_argument("--exit-code", type=int, default=None, help="Exit immediately with this code")
    args = parser.parse_args()

    if args.exit_code is not None:
        sys.stderr.write("fake driver exiting with {}\n".format(args.exit_code))
        sys.exit(args.exit_code)

    if args.delay:
        time.sleep(args.delay)

    server = http.server.ThreadingHTTPServer(("127.0.0.1", args.port), FakeDriverHandler)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
