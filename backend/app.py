import os
import sys
from pathlib import Path

from dotenv import load_dotenv


def main() -> None:
    load_dotenv(Path(__file__).resolve().parents[1] / ".env")

    # Same default as create_app: eventlet unless Windows or Python >= 3.13.
    async_mode = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    if async_mode == "eventlet" or (
        not async_mode and not sys.platform.startswith("win") and sys.version_info < (3, 13)
    ):
        import eventlet

        eventlet.monkey_patch()

    # Config reads the environment at import time, so import after load_dotenv.
    from charades.server import create_app

    app, socketio = create_app()
    socketio.run(
        app,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "3001")),
        debug=os.environ.get("FLASK_DEBUG", "0") == "1",
    )


if __name__ == "__main__":
    main()
