"""Wire the front door to the real Anthropic, Trello and vault clients."""

from __future__ import annotations

from functools import partial

from ctx_agent.config.settings import Settings
from ctx_agent.conversation.handler import ConversationHandler
from ctx_agent.graph.runner import run_agent
from ctx_agent.llm.client import AnthropicMessagesClient, CompletionClient
from ctx_agent.services.trello import TrelloClient
from ctx_agent.services.vault import NotesVault
from ctx_agent.storage.base import ApprovalStore, ConversationId
from ctx_agent.storage.memory import InMemoryApprovalStore
from ctx_agent.tools.gateway import ToolExecutor


def build_handler(
    settings: Settings,
    *,
    approvals: ApprovalStore | None = None,
    client: CompletionClient | None = None,
    trello: TrelloClient | None = None,
    vault: NotesVault | None = None,
) -> ConversationHandler:
    approvals = approvals if approvals is not None else InMemoryApprovalStore()
    client = client or AnthropicMessagesClient(
        api_key=settings.resolved_anthropic_api_key(),
        model=settings.llm_model,
        base_url=settings.llm_base_url,
        api_version=settings.llm_api_version,
        max_tokens=settings.llm_max_tokens,
        timeout_s=settings.llm_timeout_s,
    )
    trello = trello or TrelloClient(
        api_key=settings.resolved_trello_api_key(),
        token=settings.resolved_trello_token(),
        base_url=settings.resolved_trello_base_url(),
        timeout_s=settings.trello_timeout_s,
    )
    if vault is None:
        vault_path = settings.resolved_vault_path()
        if not vault_path:
            raise RuntimeError(
                "Missing vault path. Set CTX_AGENT_VAULT_PATH or run "
                "`ctx-agent config set-vault <path>`."
            )
        vault = NotesVault(vault_path)
    default_list_id = settings.resolved_default_list_id()

    def _executor_for(conversation_id: ConversationId) -> ToolExecutor:
        return ToolExecutor(
            trello=trello,
            vault=vault,
            approvals=approvals,
            conversation_id=conversation_id,
            default_list_id=default_list_id,
        )

    return ConversationHandler(
        approvals=approvals,
        executor_factory=_executor_for,
        agent_runner=partial(run_agent, client=client, settings=settings),
    )
