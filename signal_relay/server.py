import argparse
import asyncio
import logging
import os
import ssl
from dataclasses import dataclass
from typing import Optional

import websockets

from .registry import Registry
from .transport import WebSocketTransport

log = logging.getLogger(__name__)

DEFAULT_PORT = 5000


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    use_ssl: bool = False
    certfile: Optional[str] = None
    keyfile: Optional[str] = None
    log_level: str = "INFO"

    @property
    def scheme(self):
        return "wss" if self.use_ssl else "ws"


def ssl_context(config):
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    ctx.load_cert_chain(certfile=config.certfile, keyfile=config.keyfile)
    return ctx


def serve(config, transport=None):
    """Return the ``websockets.serve`` context for ``config``.

    A fresh registry and transport are built unless ``transport`` is given.
    """
    if transport is None:
        transport = WebSocketTransport(Registry())
    kwargs = {}
    if config.use_ssl:
        kwargs["ssl"] = ssl_context(config)
    return websockets.serve(transport.handler, config.host, config.port, **kwargs)


async def main(config):
    log.info("=" * 50)
    log.info(" Signaling Server Starting...")
    log.info(" Listening on %s://%s:%s", config.scheme, config.host, config.port)
    log.info("=" * 50)
    async with serve(config):
        await asyncio.Future()


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="WebRTC signaling relay")
    ap.add_argument("--host", default="0.0.0.0", help="bind address")
    ap.add_argument("--port", type=int, default=int(os.environ.get("PORT", DEFAULT_PORT)),
                    help="listen port (default: $PORT or %d)" % DEFAULT_PORT)
    ap.add_argument("--ssl", "--wss", dest="use_ssl", action="store_true",
                    help="serve wss:// using --certfile/--keyfile")
    ap.add_argument("--certfile", help="PEM certificate chain for --ssl")
    ap.add_argument("--keyfile", help="PEM private key for --ssl")
    ap.add_argument("--log-level", default=os.environ.get("LOG_LEVEL", "INFO"),
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = ap.parse_args(argv)
    if args.use_ssl and not args.certfile:
        ap.error("--ssl requires --certfile")
    return ServerConfig(host=args.host, port=args.port, use_ssl=args.use_ssl,
                        certfile=args.certfile, keyfile=args.keyfile,
                        log_level=args.log_level)


def run(argv=None):
    config = parse_args(argv)
    logging.basicConfig(level=config.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        asyncio.run(main(config))
    except KeyboardInterrupt:
        log.info("Server stopped")


if __name__ == "__main__":
    run()
