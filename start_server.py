#!/usr/bin/env python3
"""Start script for container deployments that honours the PORT environment variable."""

import os
import sys

import uvicorn

# Get PORT from environment, default to 8000
port = os.environ.get("PORT", "8000")

try:
    port_int = int(port)
except ValueError:
    print(f"Warning: Invalid PORT value '{port}', using default 8000", file=sys.stderr)
    port_int = 8000

# Running from a source checkout without an installed package
src_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
if os.path.isdir(src_path) and src_path not in sys.path:
    sys.path.insert(0, src_path)

print(f"Starting server on port {port_int}...", file=sys.stderr)

if __name__ == "__main__":
    uvicorn.run(
        "salon_ops.main:app",
        host="0.0.0.0",
        port=port_int,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
