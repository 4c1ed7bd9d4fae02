"""
core/orchestrator.py

Central coordinator for one operator command.

This module contains the coordination logic that:
1. Records the operator's command in the conversation
2. Hands it to the execution subsystem
3. Asks the reply chain for a natural-language reply
4. Records the reply (or a flagged error) and clears the busy flag
"""

from typing import Optional

from agent_api.base import AgentDirectory, ExecutionDispatcher
from config.logging_config import get_logger
from monitoring.metrics import COMMAND_COUNT, COMMAND_PROCESSING_TIME, ERROR_COUNT, track_latency
from services.conversation_store import ConversationStore
from shared.errors import OrchestratorBusyError
from shared.models import Message, MessageRole
from shared.utils import create_dispatch_error_message, truncate_message_for_logging

from .reply_chain import ReplyRequest, ReplySourceChain

logger = get_logger(__name__)


class CommandOrchestrator:
    """
    Runs commands through dispatch and the reply chain, one at a time.

    Responsibilities:
    - Appending the user message before any network activity
    - Converting dispatch failures into a visible, flagged agent message
    - Building the reply request from conversation and directory snapshots
    - Guaranteeing that every accepted command ends with exactly one agent message
    - Rejecting a new command while one is in flight
    """

    def __init__(
        self,
        dispatcher: ExecutionDispatcher,
        reply_chain: ReplySourceChain,
        store: Optional[ConversationStore] = None,
        directory: Optional[AgentDirectory] = None,
        context_window: int = 10,
    ):
        """
        Args:
            dispatcher (ExecutionDispatcher): Execution subsystem collaborator
            reply_chain (ReplySourceChain): Ordered reply tiers
            store (Optional[ConversationStore]): Conversation log; a fresh one is created when omitted
            directory (Optional[AgentDirectory]): Source of the agent roster and system metrics
            context_window (int): How many prior messages are passed to the reply chain
        """
        self.dispatcher = dispatcher
        self.reply_chain = reply_chain
        self.store = store if store is not None else ConversationStore()
        self.directory = directory
        self.context_window = context_window
        self._busy = False

    @property
    def is_busy(self) -> bool:
        return self._busy

    async def execute_command(self, text: str) -> Optional[Message]:
        """
        Main entry point for command processing.

        Args:
            text (str): Raw command typed or spoken by the operator

        Returns:
            Optional[Message]: The agent message appended for this command, or None when the
            command was blank and nothing happened.

        Raises:
            OrchestratorBusyError: If another command is still being processed.
        """
        command = (text or "").strip()
        if not command:
            logger.debug("Ignoring blank command")
            return None
        if self._busy:
            raise OrchestratorBusyError("A command is already being processed")

        self._busy = True
        try:
            return await self._run(command)
        finally:
            self._busy = False

    @track_latency(COMMAND_PROCESSING_TIME)
    async def _run(self, command: str) -> Message:
        prior = self.store.all()
        history = tuple(prior[-self.context_window:]) if self.context_window > 0 else ()
        user_message = Message.create(MessageRole.USER, command)
        self.store.append(user_message)

        logger.extra.update({'command_id': user_message.id})
        logger.info(
            "Processing command",
            extra={'extra_fields': {'command_preview': truncate_message_for_logging(command, 50)}}
        )

        try:
            result = await self.dispatcher.dispatch(command)
        except Exception as e:
            logger.warning("Dispatch failed: %s: %s", type(e).__name__, e)
            ERROR_COUNT.labels(type='dispatch', location='execute_command').inc()
            COMMAND_COUNT.labels(outcome='dispatch_failed').inc()
            return self._append_error(e)

        try:
            agents, metrics = self._directory_snapshot()
            request = ReplyRequest(
                command=command,
                execution_result=result,
                conversation_history=history,
                full_history=tuple(prior),
                command_id=user_message.id,
                agents=agents,
                metrics=metrics,
            )
            envelope = await self.reply_chain.get_reply(request)

            agent_message = Message.create(
                MessageRole.AGENT,
                envelope.message,
                queued_actions=result.actions,
                metadata=envelope.metadata,
            )
            self.store.append(agent_message)
        except Exception as e:
            logger.error(
                "Error processing command",
                exc_info=True,
                extra={'extra_fields': {'error_type': type(e).__name__}}
            )
            ERROR_COUNT.labels(type='orchestrator', location='execute_command').inc()
            COMMAND_COUNT.labels(outcome='error').inc()
            return self._append_error(e)

        COMMAND_COUNT.labels(outcome='replied').inc()
        logger.info(
            "Command replied",
            extra={'extra_fields': {
                'source': agent_message.metadata.get('source'),
                'action_count': agent_message.action_count,
            }}
        )
        return agent_message

    def _append_error(self, error: BaseException) -> Message:
        message = Message.create(
            MessageRole.AGENT,
            create_dispatch_error_message(error),
            is_error=True,
        )
        self.store.append(message)
        return message

    def _directory_snapshot(self):
        if self.directory is None:
            return (), {}
        try:
            agents = tuple(dict(agent) for agent in self.directory.list_agents())
            metrics = dict(self.directory.get_system_metrics())
        except Exception as e:
            logger.warning("Agent directory unavailable: %s: %s", type(e).__name__, e)
            return (), {}
        return agents, metrics
