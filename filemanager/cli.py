import argparse
import logging
import os

from .app import create_app
from .config import Config


def main(argv=None):
    parser = argparse.ArgumentParser(description="Browser file manager server")

    parser.add_argument(
        "--root", type=str, default=Config.ROOT_DIR, help="Directory to serve"
    )
    parser.add_argument(
        "--host", type=str, default="127.0.0.1", help="Host to run the server on"
    )
    parser.add_argument(
        "--port", type=int, default=5000, help="Port to run the server on"
    )
    parser.add_argument(
        "--log-level", type=str, default=Config.LOG_LEVEL, help="Logging level"
    )
    parser.add_argument("--debug", action="store_true", help="Run Flask in debug mode")
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    root = os.path.abspath(args.root)
    app = create_app({"ROOT_DIR": root, "LOG_LEVEL": args.log_level})

    print(f"Serving {app.config['ROOT_DIR']} on http://{args.host}:{args.port}")
    app.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
