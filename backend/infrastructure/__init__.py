"""Infrastructure layer exports."""

from .agent import (
    AgentClient,
    AgentReply,
    AgentServiceError,
    HttpAgentClient,
    configure_agent_client,
    get_agent_client,
    parse_agent_response,
)
from .conversations import ConversationRepository, InMemoryConversationRepository
from .processing import (
    DataProcessor,
    DataProcessorError,
    HttpDataProcessor,
    LocalDataProcessor,
    configure_data_processor,
    get_data_processor,
)

__all__ = [
    "AgentClient",
    "AgentReply",
    "AgentServiceError",
    "HttpAgentClient",
    "configure_agent_client",
    "get_agent_client",
    "parse_agent_response",
    "ConversationRepository",
    "InMemoryConversationRepository",
    "DataProcessor",
    "DataProcessorError",
    "HttpDataProcessor",
    "LocalDataProcessor",
    "configure_data_processor",
    "get_data_processor",
]
