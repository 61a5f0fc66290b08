"""HTTP entry point: one endpoint that forwards messages to the assistant.

Flask serves requests on its own threads while the assistant, its HTTP
client and its lock live on a single asyncio loop owned by ``AgentRunner``.
Every request is handed to that loop, so turns are processed one at a time.
"""

import argparse
import asyncio
import sys
import threading
from collections.abc import Coroutine
from typing import Any, TypeVar

import structlog
from flask import Flask, jsonify, request

from ledger_agent.agents.assistant import AssistantAgent, create_llm_client
from ledger_agent.config import configure_logging, get_settings
from ledger_agent.tools.definitions import build_registry
from ledger_agent.tools.transport import LocalToolTransport

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class AgentRunner:
    """Runs coroutines on one background event loop."""

    def __init__(self) -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._serve, name="agent-loop", daemon=True)

    def _serve(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive()

    def start(self) -> "AgentRunner":
        self._thread.start()
        return self

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Block the calling thread until ``coro`` finishes on the loop."""
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result()

    def stop(self) -> None:
        if self.is_running:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join()
        self._loop.close()

    def __enter__(self) -> "AgentRunner":
        return self.start()

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.stop()


def create_app(agent: AssistantAgent, runner: AgentRunner) -> Flask:
    """Build the Flask app serving ``POST /api/message``."""
    app = Flask(__name__)

    @app.route("/api/message", methods=["POST"])
    def message_endpoint():
        data = request.get_json(silent=True)
        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(message, str) or not message.strip():
            return jsonify({"error": "no message provided"}), 400

        try:
            reply = runner.run(agent.handle_message(message))
        except Exception as e:
            logger.exception("message_failed")
            return jsonify({"error": f"Model request failed: {e}"}), 502
        return jsonify({"reply": reply})

    return app


def main(argv: list[str] | None = None) -> None:
    """Run the assistant server, or answer a single message and exit.

    Usage:
        ledger-agent                          # serve POST /api/message
        ledger-agent --provider=claude        # use Claude instead of Gemini
        ledger-agent "list bank accounts"     # one turn, printed to stdout
    """
    settings = get_settings()
    parser = argparse.ArgumentParser(description="FrontAccounting chat assistant")
    parser.add_argument("--host", default=settings.server_host, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.server_port, help="Bind port")
    parser.add_argument(
        "--provider",
        choices=["gemini", "claude"],
        default=settings.llm_provider,
        help=f"LLM provider (default: {settings.llm_provider})",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default=None
    )
    parser.add_argument("--log-format", choices=["json", "console"], default=None)
    parser.add_argument("message", nargs="*", help="Optional single message to answer")
    args = parser.parse_args(argv)

    configure_logging(level=args.log_level, format=args.log_format)

    transport = LocalToolTransport(build_registry())
    agent = AssistantAgent(transport, llm_client=create_llm_client(args.provider))

    with AgentRunner() as runner:
        try:
            if args.message:
                print(runner.run(agent.handle_message(" ".join(args.message))))
                return
            logger.info("server_starting", host=args.host, port=args.port, provider=args.provider)
            create_app(agent, runner).run(host=args.host, port=args.port, threaded=True)
        except KeyboardInterrupt:
            logger.info("server_interrupted")
        except Exception as e:
            logger.exception("server_error", error=str(e))
            sys.exit(1)
        finally:
            runner.run(transport.close())


if __name__ == "__main__":
    main()
