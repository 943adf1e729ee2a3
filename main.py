#!/usr/bin/env python3
"""
Console chat with the agent.

Confirm-required tool calls are shown with their arguments and wait for a y/n
answer before the conversation continues.
"""

import json
import sys

from caddie.agent.agent_loop import ChatAgent
from caddie.logging import setup_logging


def ask_decisions(pending):
    decisions = {}
    for call in pending:
        arguments = json.dumps(call.get("arguments") or {})
        answer = input(f"Allow {call['tool_name']}({arguments})? [y/N] ").strip().lower()
        decisions[call["call_id"]] = "approved" if answer in ("y", "yes") else "denied"
    return decisions


def main() -> int:
    setup_logging()
    try:
        agent = ChatAgent()
    except ValueError as e:
        print(f"Configuration error: {e}")
        return 1

    agent.scheduler.start()
    print("Type a message, or 'quit' to exit.")
    try:
        while True:
            try:
                message = input("> ").strip()
            except EOFError:
                break
            if message in ("quit", "exit"):
                break
            if not message:
                continue

            result = agent.on_chat_message(user_message=message)
            while result["pending"]:
                if result["answer"]:
                    print(result["answer"])
                result = agent.on_chat_message(decisions=ask_decisions(result["pending"]))
            print(result["answer"] or "")
    finally:
        agent.scheduler.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
