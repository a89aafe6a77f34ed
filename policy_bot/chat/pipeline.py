"""Retrieval-augmented answer pipeline."""

from typing import Any, Dict, List, Optional

from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import Runnable, RunnableConfig

from policy_bot.chat.memory import ConversationMemory
from policy_bot.errors import RetrievalError
from policy_bot.rag.retriever import HybridRetriever, format_retrieved_context
from policy_bot.utils.logger import get_logger
from policy_bot.utils.prompts import get_policy_assistant_prompt

logger = get_logger(__name__)

NOT_INITIALIZED_MESSAGE = "Vector store not initialized."
NO_CONTEXT_MESSAGE = (
    "I couldn't find any relevant policy information to answer that right now. "
    "Please try again later or rephrase your question."
)
ERROR_MESSAGE = (
    "Sorry, an error occurred while processing your request. Please try again."
)

CONTEXT_TEMPLATE = (
    "\n\n--- CONVERSATION HISTORY ---\n{conversation_history}"
    "\n--- CONTEXT ---\n{context}\n---"
)


def build_prompt(system_prompt: str) -> ChatPromptTemplate:
    """
    Build the chat prompt: system instructions with history and context,
    followed by the user's question.
    """
    return ChatPromptTemplate.from_messages(
        [
            ("system", system_prompt.strip() + CONTEXT_TEMPLATE),
            ("human", "{question}"),
        ]
    )


class AnswerPipeline:
    """
    Answers one question: retrieve, render history, prompt, generate, remember.

    Degraded outcomes are returned as fixed messages instead of raised:

    - retriever not ready: ``NOT_INITIALIZED_MESSAGE``
    - every retrieval path failed: ``NO_CONTEXT_MESSAGE`` (remembered as the answer)
    - generation failed: ``ERROR_MESSAGE`` (only the question is remembered)

    Memory is written once, after the answer is known, so abandoning the
    call midway leaves the conversation unchanged.

    Args:
        retriever: Hybrid retriever
        llm: Chat model or any runnable turning a prompt into a message/string
        memory: Default conversation memory
        system_prompt: Instructions (defaults to prompts/policy_assistant.txt)
    """

    def __init__(
        self,
        retriever: HybridRetriever,
        llm: Runnable,
        memory: Optional[ConversationMemory] = None,
        system_prompt: Optional[str] = None,
    ):
        self.retriever = retriever
        self.memory = memory if memory is not None else ConversationMemory()
        self.prompt = build_prompt(system_prompt or get_policy_assistant_prompt())
        self.chain = self.prompt | llm | StrOutputParser()

    async def answer(
        self,
        question: str,
        memory: Optional[ConversationMemory] = None,
        callbacks: Optional[List[Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Answer a question using retrieved policy context.

        Args:
            question: User question
            memory: Session memory to use instead of the pipeline's default
            callbacks: LangChain callbacks (e.g. Langfuse) for the generation call
            metadata: Run metadata attached to the generation call

        Returns:
            The answer, or a fixed message when the pipeline degraded
        """
        memory = memory if memory is not None else self.memory

        if not self.retriever.is_ready:
            logger.warning("Question received before the retriever was initialized")
            return NOT_INITIALIZED_MESSAGE

        try:
            passages = await self.retriever.retrieve(question)
        except RetrievalError as e:
            logger.error(f"Retrieval failed: {e}")
            memory.append_exchange(question, NO_CONTEXT_MESSAGE)
            return NO_CONTEXT_MESSAGE

        logger.debug(f"Found {len(passages)} relevant chunks")

        inputs = {
            "context": format_retrieved_context(passages),
            "conversation_history": memory.render(),
            "question": question,
        }
        config = RunnableConfig(callbacks=callbacks or [], metadata=metadata or {})

        try:
            result = await self.chain.ainvoke(inputs, config=config)
        except Exception as e:
            logger.error(f"Generation failed: {e}", exc_info=True)
            memory.append_exchange(question)
            return ERROR_MESSAGE

        answer = result if isinstance(result, str) else str(result)
        memory.append_exchange(question, answer)
        return answer
