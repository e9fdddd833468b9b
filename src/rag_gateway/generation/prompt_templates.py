"""Prompt templates for context injection."""

DOCUMENT_DELIMITER = "\n\n---\n\n"

AUTHORITATIVE_CONTEXT_PREAMBLE = """The following documents are the authoritative source of truth for this conversation.
Rules:
- Treat the documents as correct and current, even where they differ from what you learned during training.
- If the documents conflict with your trained knowledge, follow the documents.
- If the documents do not contain enough information to answer, say so explicitly instead of guessing.

Documents:
{documents}

End of documents."""

PROMPT_WITH_CONTEXT = """{context}

Question: {prompt}"""

SYSTEM_REINFORCEMENT = (
    "Base your answer on the provided documents; they take precedence over prior knowledge."
)


def format_documents(contents: list[str]) -> str:
    return DOCUMENT_DELIMITER.join(contents)


def format_context(contents: list[str]) -> str:
    return AUTHORITATIVE_CONTEXT_PREAMBLE.format(documents=format_documents(contents))
