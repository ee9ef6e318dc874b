#!/usr/bin/env python3
"""
A very basic gopher client to use for testing server configurations.
"""
import argparse
import socket
import sys


def fetch(selector, host="localhost", port=70):
    with socket.create_connection((host, port)) as sock:
        sock.sendall((selector + "\r\n").encode(errors="surrogateescape"))
        fp = sock.makefile("rb", buffering=0)
        data = fp.read(1024)
        while data:
            sys.stdout.buffer.write(data)
            sys.stdout.buffer.flush()
            data = fp.read(1024)


def run_client():
    parser = argparse.ArgumentParser(description="A simple gopher client")
    parser.add_argument("selector", nargs="?", default="")
    parser.add_argument("--host", help="Server host", default="localhost")
    parser.add_argument("--port", help="Server port", type=int, default=70)

    args = parser.parse_args()
    fetch(args.selector, args.host, args.port)


if __name__ == "__main__":
    run_client()
