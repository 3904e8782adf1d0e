from __future__ import annotations

import argparse
import logging
import mimetypes
import sys
from pathlib import Path

from .errors import HrqError
from .payload import APPLICATION_JSON
from .request import METHODS, Request, new_request


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="hrq", description="Send an HTTP request and print the response.")
    parser.add_argument("method", type=str.upper, choices=METHODS, help="HTTP method")
    parser.add_argument("url", help="Request URL")
    parser.add_argument("-H", "--header", action="append", default=[], help="Header as 'Name: value'")
    parser.add_argument("-d", "--data", action="append", default=[], help="Body field as key=value")
    parser.add_argument("-F", "--file", action="append", default=[], help="File part as field=path")
    parser.add_argument("--json", action="store_true", help="Send fields as a JSON object")
    parser.add_argument("--gzip", action="store_true", help="Compress the request body")
    parser.add_argument("--timeout", type=float, default=None, help="Timeout in seconds")
    parser.add_argument("-i", "--include", action="store_true", help="Print status line and headers")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log request details to stderr")

    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    try:
        request = _build_request(args)
        with request.send() as response:
            if args.include:
                print(f"{response.status_code} {response.raw.reason_phrase}")
                for key, value in response.headers.multi_items():
                    print(f"{key}: {value}")
                print()
            print(response.text())
    except HrqError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


def _build_request(args: argparse.Namespace) -> Request:
    request = new_request(args.method, args.url, timeout=args.timeout)
    for header in args.header:
        key, sep, value = header.partition(":")
        if not sep:
            raise ValueError(f"Header must look like 'Name: value': {header!r}")
        request.add_header(key.strip(), value.strip())

    fields: dict[str, list[str]] = {}
    for item in args.data:
        key, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"Data must look like key=value: {item!r}")
        fields.setdefault(key, []).append(value)

    if args.file:
        if request.method not in {"POST", "PUT"}:
            raise ValueError("File parts need POST or PUT")
        request.set_multipart_form_data()
        for item in args.file:
            field_name, sep, path_str = item.partition("=")
            if not sep:
                raise ValueError(f"File must look like field=path: {item!r}")
            path = Path(path_str)
            content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
            request.add_file(content_type, field_name, path.name, path.open("rb"))
        request.data = {key: values[-1] for key, values in fields.items()}
    elif args.json:
        request.set_header("Content-Type", APPLICATION_JSON)
        request.data = {key: values[0] if len(values) == 1 else values for key, values in fields.items()}
    elif fields:
        if not request.content_type():
            request.set_application_form_urlencoded()
        request.data = fields

    if args.gzip:
        request.use_gzip()
    return request


if __name__ == "__main__":
    raise SystemExit(main())
