"""Chat agent: one conversation, its transcript and the tool calls made in it."""

import threading
from typing import Any, Dict, List, Mapping, Optional

from ..cache.cache import Cache
from ..clients.browser_client import BrowserClient
from ..clients.chat_client import ChatClient
from ..config import DEFAULT_MAX_STEPS, SYSTEM_PROMPT
from .context import ToolContext
from .pipeline import Decision, pending_confirmations, reconcile
from .registry import ToolRegistry
from .scheduler import TaskScheduler
from .tools import default_registry
from ..logging import get_logger

logger = get_logger(__name__)

ERROR_MESSAGE_TEMPLATE = (
    "I encountered an error while trying to perform a task: {error}. "
    "Let's continue our conversation. How can I assist you further?"
)


class ChatAgent:
    """
    Conversational agent for a single chat session.

    The transcript is append-only: the model's messages and tool results are
    added at the end, and missing tool results are filled in by reconcile().
    """

    def __init__(
        self,
        chat_client: Optional[ChatClient] = None,
        registry: Optional[ToolRegistry] = None,
        browser_client: Optional[BrowserClient] = None,
        cache: Optional[Cache] = None,
        scheduler: Optional[TaskScheduler] = None,
        messages: Optional[List[Dict[str, Any]]] = None,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        self.chat_client = chat_client or ChatClient()
        self.registry = registry or default_registry()
        self.messages: List[Dict[str, Any]] = list(messages or [])
        self.system_prompt = system_prompt
        self.scheduler = scheduler or TaskScheduler(self)
        self.context = ToolContext(
            scheduler=self.scheduler,
            browser=browser_client or BrowserClient(),
            cache=cache or Cache(),
            transcript=lambda: list(self.messages),
        )
        self._lock = threading.RLock()

    def on_chat_message(
        self,
        user_message: Optional[str] = None,
        decisions: Optional[Mapping[str, Decision]] = None,
        max_steps: int = DEFAULT_MAX_STEPS,
    ) -> Dict[str, Any]:
        """
        Handle one inbound chat message.

        Args:
            user_message: New user text, if any
            decisions: Human approvals/denials keyed by tool call id
            max_steps: Maximum number of model round-trips

        Returns:
            Dict with: {answer, pending}; pending lists the tool calls that
            wait for a human decision
        """
        with self._lock:
            if user_message:
                self.messages.append({"role": "user", "content": user_message})
            return self._run_turn(decisions, max_steps)

    def _run_turn(self, decisions: Optional[Mapping[str, Decision]], max_steps: int) -> Dict[str, Any]:
        if not self._reconcile(decisions):
            return self._recover()

        pending = pending_confirmations(self.messages, self.registry)
        if pending:
            logger.info(f"Waiting for confirmation of {len(pending)} tool call(s)")
            return {"answer": None, "pending": [intent.to_dict() for intent in pending]}

        tools = self.registry.to_openai_tools()
        for step in range(max_steps):
            logger.info(f"Agent step {step + 1}/{max_steps}")

            try:
                reply = self.chat_client.chat(self._llm_messages(), tools=tools)
            except Exception as e:
                logger.error(f"LLM call failed: {e}")
                return {"answer": f"Error communicating with LLM: {e}", "pending": []}

            assistant_message = self._append_reply(reply)
            if not reply.get("tool_calls"):
                answer = assistant_message["content"]
                logger.info(f"Agent completed with final answer ({len(answer)} chars)")
                return {"answer": answer, "pending": []}

            if not self._reconcile(None):
                return self._recover()

            pending = pending_confirmations(self.messages, self.registry)
            if pending:
                logger.info(f"Waiting for confirmation of {len(pending)} tool call(s)")
                return {
                    "answer": assistant_message["content"] or None,
                    "pending": [intent.to_dict() for intent in pending],
                }

        logger.warning(f"Reached max_steps limit ({max_steps})")
        return {
            "answer": "I reached the step limit before finishing. Please try again or rephrase your request.",
            "pending": [],
        }

    def _append_reply(self, reply: Dict[str, Any]) -> Dict[str, Any]:
        assistant_message = {"role": "assistant", "content": reply.get("content") or ""}
        if reply.get("tool_calls"):
            assistant_message["tool_calls"] = reply["tool_calls"]
        self.messages.append(assistant_message)
        return assistant_message

    def _reconcile(self, decisions: Optional[Mapping[str, Decision]]) -> bool:
        """Run the pipeline; on failure append an apology and return False."""
        try:
            self.messages = reconcile(self.messages, self.registry, self.context, decisions)
            return True
        except Exception as e:
            logger.error(f"Error processing tool calls: {e}", exc_info=True)
            self.messages.append({"role": "assistant", "content": ERROR_MESSAGE_TEMPLATE.format(error=e)})
            return False

    def _recover(self) -> Dict[str, Any]:
        """Let the model answer after the apology, without offering tools."""
        try:
            reply = self.chat_client.chat(self._llm_messages())
        except Exception as e:
            logger.error(f"LLM call failed after pipeline error: {e}")
            return {"answer": self.messages[-1]["content"], "pending": []}

        answer = {"role": "assistant", "content": reply.get("content") or ""}
        self.messages.append(answer)
        return {"answer": answer["content"], "pending": []}

    def _llm_messages(self) -> List[Dict[str, Any]]:
        return [{"role": "system", "content": self.system_prompt}] + self.messages

    def execute_task(self, description: str) -> Dict[str, Any]:
        """Scheduler callback: announce the task in the transcript and let the agent answer it."""
        logger.info(f"Running scheduled task: {description}")
        with self._lock:
            self.messages.append({"role": "user", "content": f"Running scheduled task: {description}"})
            result = self._run_turn(None, DEFAULT_MAX_STEPS)
        logger.info(f"Scheduled task answered: {result['answer']}")
        return result
